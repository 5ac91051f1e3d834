# src/config/__init__.py
"""Configuration loaded from the environment."""
