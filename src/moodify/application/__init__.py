"""Application layer: use-case services and input validation."""
