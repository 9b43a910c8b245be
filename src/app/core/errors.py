"""Error taxonomy for the deployment pipeline.

Every error carries a client-facing ``message`` that is safe to return over
HTTP and an optional ``details`` string that is only ever written to the
server log.
"""

from __future__ import annotations


class DeploymentPipelineError(Exception):
    """Base class for errors raised by the deployment pipeline."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationRejection(DeploymentPipelineError):
    """Raised when user input fails shape, character or length checks."""


class UpstreamProcessFailure(DeploymentPipelineError):
    """Raised when an external binary exits non-zero or cannot be spawned."""


class PersistenceFailure(DeploymentPipelineError):
    """Raised when the deployment record cannot be written or read."""
