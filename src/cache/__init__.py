# src/cache/__init__.py
"""Cache stores and the caching document store decorator."""
