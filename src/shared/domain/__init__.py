"""Shared domain: entities and error types."""
