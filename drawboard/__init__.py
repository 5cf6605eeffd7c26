"""Drawing upload and collage service."""

__version__ = "1.0.0"
