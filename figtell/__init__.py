"""figtell - Figma design rules extractor."""

__version__ = "0.1.0"
