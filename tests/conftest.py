"""Root conftest — shared test configuration."""

import os

# Tests always run against stores they build themselves
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SWEEP_ENABLED", "false")
os.environ.pop("DATABASE_URL", None)
