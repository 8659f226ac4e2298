"""Database Package — SQLAlchemy declarative base for the key-value store.

Invariants:
    - Base is the single source of truth for table metadata
"""
