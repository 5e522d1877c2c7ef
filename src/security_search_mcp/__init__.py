"""Full-text and structured search over security news articles."""

__version__ = "1.0.0"
