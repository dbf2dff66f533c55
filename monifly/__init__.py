"""Monifly financial domain engine."""

__version__ = "0.1.0"
