"""Infrastructure Layer — concrete clocks, transports, stores, and logging.

Invariants:
    - Infrastructure never imports from services/
    - Every external failure is mapped to a ClientError subclass (core/errors.py)

Design Decisions:
    - Thin adapters implementing core/protocols.py: services stay testable with fakes
"""
