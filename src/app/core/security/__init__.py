"""Input validation and security analysis for Helm deployments.

Modules:
    input_validation: Reject unsafe repository and install strings
    helm_values: Extract ``--set`` assignments from a validated install line
    rules: Evaluate security rules and build a SecurityReport
    models: Shared data types
"""

from .helm_values import (
    extract_namespace,
    extract_release,
    parse_helm_values,
    to_set_arguments,
)
from .input_validation import (
    validate_helm_install,
    validate_input,
    validate_repository,
)
from .models import (
    Finding,
    HelmValueMap,
    RepositorySpec,
    SecurityReport,
    Severity,
    ValidatedCommandLine,
)
from .rules import RULES, SecurityRule, flatten_values, validate_helm_chart

__all__ = [
    "Finding",
    "HelmValueMap",
    "RepositorySpec",
    "SecurityReport",
    "Severity",
    "ValidatedCommandLine",
    "validate_input",
    "validate_repository",
    "validate_helm_install",
    "parse_helm_values",
    "to_set_arguments",
    "extract_namespace",
    "extract_release",
    "RULES",
    "SecurityRule",
    "flatten_values",
    "validate_helm_chart",
]
