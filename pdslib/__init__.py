"""Private data service with epoch-based differential privacy accounting."""

__version__ = "0.3.0"