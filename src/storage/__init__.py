# src/storage/__init__.py
"""Document store contract and backends."""
