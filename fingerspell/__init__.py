"""ASL fingerspelling recognition backend."""

__version__ = "0.1.0"
