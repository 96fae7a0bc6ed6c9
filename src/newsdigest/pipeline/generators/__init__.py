"""Digest analysis generation."""

from newsdigest.pipeline.generators.analysis_generator import (
    DEFAULT_TITLE,
    DigestAnalyzer,
    fallback_analysis,
    parse_analysis,
)

__all__ = ["DEFAULT_TITLE", "DigestAnalyzer", "fallback_analysis", "parse_analysis"]
