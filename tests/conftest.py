"""Root conftest — shared test configuration."""

import os

# Ensure tests never talk to a real backend or database
os.environ.setdefault("BACKEND_URL", "https://backend.test/exec")
os.environ.setdefault("BACKEND_API_KEY", "test-key")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
