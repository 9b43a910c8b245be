import os

# Set minimal required env vars before any imports that might load config
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-unit-tests-only")
os.environ.setdefault("APP_ENVIRONMENT", "test")

from tests.fixtures import *  # noqa: F401,F403
