"""Application layer: ports, use cases, serialization and the store façade."""
