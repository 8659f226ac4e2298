"""ORM Models — persisted client state.

Invariants:
    - Models contain no behaviour beyond column definitions
"""
