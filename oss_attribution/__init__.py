"""oss-attribution — third-party attribution reports for npm projects."""

__version__ = "0.1.0"
