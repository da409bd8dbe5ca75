"""relpipe: ordered plugin pipeline for automated releases."""

__version__ = "0.1.0"
