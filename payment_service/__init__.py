"""Idempotent payment charging service."""

__version__ = "0.1.0"
