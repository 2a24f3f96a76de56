"""Packaged JSON schemas for devloop."""
