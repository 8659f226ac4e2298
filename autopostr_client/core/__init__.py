"""Core Layer — pure domain logic, no IO, no network, no timers.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions are pure and deterministic (clock values are passed in)

Design Decisions:
    - Functional core separated from imperative shell: the services layer
      orchestrates async IO around these pure helpers
"""
