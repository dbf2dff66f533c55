"""Adapters package: command-line entry points."""
