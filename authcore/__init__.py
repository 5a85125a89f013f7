"""Authentication and authorization core for the book collection API."""

__version__ = "0.1.0"
