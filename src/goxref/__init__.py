"""goxref - cross-reference engine for Go source."""

__version__ = "0.1.0"
