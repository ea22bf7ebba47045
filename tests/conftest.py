# tests/conftest.py
"""
Pytest configuration shared by every test package.

Testing flags and an in-memory database URL are set before anything from
``tractorhire`` is imported, so the settings singleton never points at a real
database or Redis.
"""

import os

os.environ["is_testing"] = "true"
os.environ["database_url"] = "sqlite+pysqlite:///:memory:"
os.environ["redis_url"] = ""
os.environ["gate_capacity_at_request"] = "false"

from tractorhire.core.config import settings  # noqa: E402

settings.is_testing = True
settings.redis_url = None
