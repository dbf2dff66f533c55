"""Identifier generation helpers."""

from uuid import uuid4


def generate_id(prefix: str) -> str:
    """Return a new opaque identifier such as ``wallet_3f2a...``."""
    return f"{prefix}_{uuid4().hex}"


__all__ = ["generate_id"]
