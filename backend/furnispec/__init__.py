"""Furniture specification language, validation and pricing."""

__version__ = "0.1.0"
