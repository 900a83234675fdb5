"""Knowledge fusion and fact verification."""

__version__ = "0.1.0"
