"""Text corpus curation tool."""

__version__ = "1.0.0"
