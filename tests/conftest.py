"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach real partner APIs or a real database
os.environ.setdefault("ASAAS_MOCK_ENABLED", "true")
os.environ.setdefault("ASAAS_API_KEY", "")
os.environ.setdefault("BOMCONTROLE_API_KEY", "")
os.environ.setdefault("CLINT_WEBHOOK_URL", "")
os.environ.setdefault("ASAAS_WEBHOOK_TOKEN", "")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
