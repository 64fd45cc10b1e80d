"""relaynote: reliable notification delivery for single-loop hosts."""

__version__ = "1.0.0"
