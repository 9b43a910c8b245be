"""CLI command modules.

Commands:
- check: Validate inputs and print the security report
- deploy: Run a Helm deployment locally
- serve: Run the HTTP API
- db: Deployment record database utilities
"""

from .db import db_app
from .deploy import check, deploy
from .serve import serve

__all__ = [
    "check",
    "db_app",
    "deploy",
    "serve",
]
