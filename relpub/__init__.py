"""relpub - publish GitHub releases with generated release notes."""

__version__ = "0.3.0"
