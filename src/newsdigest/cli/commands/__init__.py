"""CLI commands for NewsDigest."""

from newsdigest.cli.commands.run import run
from newsdigest.cli.commands.trends import trends

__all__ = ["run", "trends"]
