"""NewsDigest - multi-source tech news aggregation and daily digests."""

from newsdigest.__version__ import __version__

__all__ = ["__version__"]
