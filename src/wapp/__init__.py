"""Command-line weather client over interchangeable HTTP providers."""

__version__ = "0.1.0"
