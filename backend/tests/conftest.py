"""Root conftest — shared test configuration."""

import os

# Ensure tests never sign tokens with a real secret or reach a real database
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-use-only")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
