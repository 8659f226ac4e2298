"""Services Layer — request orchestration and session lifecycle.

Invariants:
    - ApiClient is the only component that talks to a Transport
    - SessionManager is the only component that writes session entries

Design Decisions:
    - Every collaborator injected through the constructor (no global instances)
"""
