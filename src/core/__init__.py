# src/core/__init__.py
"""Identifiers, codec, query matching and error types."""
