"""Infrastructure package: logging, settings, database and persistence adapters."""
