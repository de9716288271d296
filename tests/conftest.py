"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database or data service
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATA_SERVICE_URL", "https://data.test")
os.environ.setdefault("DATA_SERVICE_KEY", "test-service-key")
os.environ.setdefault("PASSWORD_HASH_COST", "4")
os.environ.setdefault("LOG_FORMAT", "text")
