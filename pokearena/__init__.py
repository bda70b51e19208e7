"""A four-player turn-based monster tournament played from the console."""

__version__ = "0.1.0"