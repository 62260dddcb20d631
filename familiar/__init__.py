"""A terminal pet that keeps its mood between shell sessions."""

__version__ = "0.4.0"
