"""Local anime library inspector."""

__version__ = "0.1.0"
