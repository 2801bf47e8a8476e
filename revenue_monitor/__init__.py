"""Revenue monitoring API for licensed gaming operators."""

__version__ = "1.0.0"
