"""Track who you spent time with, and when."""

__version__ = "0.1.0"
