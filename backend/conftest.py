"""Pytest collection helpers for backend test runs.

This file sits at the backend/ directory root so pytest loads it before any
test module imports `channel_access`, whose engine is built at import time.
"""
import os
import pytest

# Default DATABASE_URL so importing the package never needs a running PostgreSQL.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"
