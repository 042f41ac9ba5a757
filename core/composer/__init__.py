"""Task composer nodes for validating robot motion programs."""

__version__ = "0.1.0"
