"""Root conftest — shared test configuration."""

import os

# Settings must never point at a real database during tests
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
