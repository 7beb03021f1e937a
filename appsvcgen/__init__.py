"""Convert standalone Node.js functions into an Atlas App Services app project."""

__version__ = "0.1.0"
