# src/logging/__init__.py
"""Structured logging setup."""
