"""API Layer — local FastAPI bridge between page front ends and the client core.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes delegate to SessionManager / ApiClient from the ClientContext
"""
