"""Integration core for the Outfitted wardrobe gateway."""

__version__ = "1.0.0"
