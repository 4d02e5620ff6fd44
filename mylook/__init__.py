"""MyLook: context-aware outfit suggestions from a personal wardrobe."""

__version__ = "0.1.0"
