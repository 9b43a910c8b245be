"""Security rule engine for Helm values and chart templates.

The engine evaluates a fixed, ordered list of rules against a flat mapping of
dotted key paths to string values. Each rule is independent: a single value
may trigger several findings, and the order of the rules does not change the
outcome.

Findings are advisory. Report generation always succeeds: malformed values
produce warnings, and a rule that fails unexpectedly is recorded as a
``rule-failed`` warning instead of propagating the exception.

Example:
    >>> report = validate_helm_chart("", {"securityContext.privileged": "true"})
    >>> report.summary
    '1 error(s), 1 warning(s) found'
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import yaml
from loguru import logger

from src.app.core.security.models import (
    Finding,
    HelmValueMap,
    SecurityReport,
    Severity,
)

MAX_FLATTENED_ENTRIES = 10_000

TRUTHY = frozenset({"true", "1", "yes", "on"})
FALSY = frozenset({"false", "0", "no", "off"})

BOOLEAN_KEYS = frozenset(
    {
        "privileged",
        "allowprivilegeescalation",
        "hostnetwork",
        "hostpid",
        "hostipc",
        "runasnonroot",
        "readonlyrootfilesystem",
    }
)

SENSITIVE_HOST_PATHS = (
    "/",
    "/etc",
    "/root",
    "/proc",
    "/sys",
    "/dev",
    "/var/run",
    "/var/run/docker.sock",
    "/var/lib/kubelet",
    "/run/containerd",
)

DANGEROUS_CAPABILITIES = frozenset(
    {
        "ALL",
        "SYS_ADMIN",
        "NET_ADMIN",
        "SYS_PTRACE",
        "SYS_MODULE",
        "DAC_READ_SEARCH",
        "NET_RAW",
        "SYS_RAWIO",
        "BPF",
    }
)

VALID_PULL_POLICIES = frozenset({"Always", "IfNotPresent", "Never"})

_INDEX_PATTERN = re.compile(r"\[\d*\]")

CheckFn = Callable[[HelmValueMap], Iterable[str]]


@dataclass(frozen=True)
class SecurityRule:
    """A named predicate over a value mapping.

    Attributes:
        name: Stable identifier reported in each finding
        severity: Severity assigned to every finding of this rule
        description: Human-readable explanation of the risk
        check: Callable yielding one message per offending setting
        applies_to_chart: Whether the rule also runs on chart template
            documents (absence checks only make sense for values)
    """

    name: str
    severity: Severity
    description: str
    check: CheckFn
    applies_to_chart: bool = True

    def evaluate(self, values: HelmValueMap) -> list[Finding]:
        return [
            Finding(
                name=self.name,
                message=message,
                description=self.description,
                severity=self.severity,
            )
            for message in self.check(values)
        ]


# =============================================================================
# Key/value helpers
# =============================================================================


def _segments(key: str) -> list[str]:
    """Split a dotted key into lowercase segments with list indices removed."""
    return [s.lower() for s in _INDEX_PATTERN.sub("", key).split(".") if s]


def _last(key: str) -> str:
    segments = _segments(key)
    return segments[-1] if segments else ""


def _parse_bool(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered in TRUTHY:
        return True
    if lowered in FALSY:
        return False
    return None


def _items_with_last_segment(
    values: HelmValueMap, *names: str
) -> Iterator[tuple[str, str]]:
    wanted = {n.lower() for n in names}
    for key, value in values.items():
        if _last(key) in wanted:
            yield key, value


def _is_host_path_key(key: str) -> bool:
    return any("hostpath" in segment for segment in _segments(key))


def _normalize_path(value: str) -> str:
    path = posixpath.normpath(value.strip())
    # normpath keeps a leading "//" as implementation-defined.
    if path.startswith("//"):
        path = "/" + path.lstrip("/")
    return path


def _is_sensitive_path(path: str) -> bool:
    for sensitive in SENSITIVE_HOST_PATHS:
        if path == sensitive:
            return True
        if sensitive != "/" and path.startswith(f"{sensitive}/"):
            return True
    return False


# =============================================================================
# Checks
# =============================================================================


def _truthy_flag(*names: str) -> CheckFn:
    def check(values: HelmValueMap) -> Iterator[str]:
        for key, value in _items_with_last_segment(values, *names):
            if _parse_bool(value) is True:
                yield f"'{key}' is set to '{value}'"

    return check


def _check_invalid_booleans(values: HelmValueMap) -> Iterator[str]:
    for key, value in values.items():
        if _last(key) in BOOLEAN_KEYS and _parse_bool(value) is None:
            yield f"'{key}' expects a boolean but got '{value}'"


def _check_sensitive_host_paths(values: HelmValueMap) -> Iterator[str]:
    for key, value in values.items():
        if not _is_host_path_key(key) or not value.strip().startswith("/"):
            continue
        path = _normalize_path(value)
        if _is_sensitive_path(path):
            yield f"'{key}' mounts sensitive host path '{path}'"


def _check_host_path_volumes(values: HelmValueMap) -> Iterator[str]:
    for key, value in values.items():
        if not _is_host_path_key(key) or not value.strip().startswith("/"):
            continue
        path = _normalize_path(value)
        if not _is_sensitive_path(path):
            yield f"'{key}' mounts host path '{path}'"


def _check_capabilities(values: HelmValueMap) -> Iterator[str]:
    for key, value in values.items():
        if "capabilities.add" not in ".".join(_segments(key)):
            continue
        for capability in value.split(","):
            name = capability.strip().upper().removeprefix("CAP_")
            if name in DANGEROUS_CAPABILITIES:
                yield f"'{key}' adds capability '{name}'"


def _check_pull_policy(values: HelmValueMap) -> Iterator[str]:
    for key, value in _items_with_last_segment(
        values, "pullPolicy", "imagePullPolicy"
    ):
        policy = value.strip()
        if policy not in VALID_PULL_POLICIES:
            yield f"'{key}' has unrecognized pull policy '{value}'"
        elif policy == "Never":
            yield f"'{key}' is 'Never'; the image must be pre-loaded on every node"


def _check_latest_tag(values: HelmValueMap) -> Iterator[str]:
    for key, value in values.items():
        segments = _segments(key)
        if not segments:
            continue
        tag = value.strip().lower()
        if segments[-1] == "tag" and "image" in segments[:-1] and tag == "latest":
            yield f"'{key}' pins the mutable 'latest' tag"
        elif segments[-1] == "image" and tag.endswith(":latest"):
            yield f"'{key}' pins the mutable 'latest' tag"


def _check_resource_limits(values: HelmValueMap) -> Iterator[str]:
    for key in values:
        if "resources.limits" in ".".join(_segments(key)):
            return
    yield "No resource limits are set (resources.limits.*)"


def _replica_items(values: HelmValueMap) -> Iterator[tuple[str, str]]:
    return _items_with_last_segment(values, "replicaCount", "replicas")


def _check_replica_count(values: HelmValueMap) -> Iterator[str]:
    for key, value in _replica_items(values):
        try:
            count = int(value.strip())
        except ValueError:
            continue
        if count <= 0:
            yield f"'{key}' is {count}; no pods will be scheduled"


def _check_replica_count_invalid(values: HelmValueMap) -> Iterator[str]:
    for key, value in _replica_items(values):
        try:
            int(value.strip())
        except ValueError:
            yield f"'{key}' is not an integer: '{value}'"


def _check_rbac_wildcards(values: HelmValueMap) -> Iterator[str]:
    for key, value in values.items():
        segments = _segments(key)
        if not segments or segments[-1] not in {"verbs", "resources", "apigroups"}:
            continue
        if not any(s in {"rbac", "rules"} for s in segments[:-1]):
            continue
        if "*" in (part.strip() for part in value.split(",")):
            yield f"'{key}' grants wildcard '*'"


def _check_default_service_account(values: HelmValueMap) -> Iterator[str]:
    for key, value in values.items():
        segments = _segments(key)
        is_name = segments[-2:] == ["serviceaccount", "name"] or (
            bool(segments) and segments[-1] == "serviceaccountname"
        )
        if is_name and value.strip() == "default":
            yield f"'{key}' uses the namespace default service account"


def _check_run_as_root(values: HelmValueMap) -> Iterator[str]:
    for key, value in _items_with_last_segment(values, "runAsUser"):
        if value.strip() == "0":
            yield f"'{key}' runs the container as root (uid 0)"
    for key, value in _items_with_last_segment(values, "runAsNonRoot"):
        if _parse_bool(value) is False:
            yield f"'{key}' allows the container to run as root"


# =============================================================================
# Rule set
# =============================================================================

RULES: tuple[SecurityRule, ...] = (
    SecurityRule(
        name="privileged-container",
        severity=Severity.ERROR,
        description="Privileged containers have full access to the host kernel.",
        check=_truthy_flag("privileged"),
    ),
    SecurityRule(
        name="privilege-escalation",
        severity=Severity.ERROR,
        description="Processes may gain more privileges than their parent.",
        check=_truthy_flag("allowPrivilegeEscalation"),
    ),
    SecurityRule(
        name="host-network",
        severity=Severity.ERROR,
        description="Pods share the node network namespace.",
        check=_truthy_flag("hostNetwork"),
    ),
    SecurityRule(
        name="host-pid",
        severity=Severity.ERROR,
        description="Pods can see and signal every process on the node.",
        check=_truthy_flag("hostPID"),
    ),
    SecurityRule(
        name="host-ipc",
        severity=Severity.ERROR,
        description="Pods share the node IPC namespace.",
        check=_truthy_flag("hostIPC"),
    ),
    SecurityRule(
        name="host-path-sensitive",
        severity=Severity.ERROR,
        description="Mounting system paths from the node allows host takeover.",
        check=_check_sensitive_host_paths,
    ),
    SecurityRule(
        name="dangerous-capability",
        severity=Severity.ERROR,
        description="Added Linux capabilities break container isolation.",
        check=_check_capabilities,
    ),
    SecurityRule(
        name="host-path-volume",
        severity=Severity.WARNING,
        description="hostPath volumes tie pods to node-local state.",
        check=_check_host_path_volumes,
    ),
    SecurityRule(
        name="invalid-boolean",
        severity=Severity.WARNING,
        description="A security setting has a value Kubernetes will not accept.",
        check=_check_invalid_booleans,
    ),
    SecurityRule(
        name="image-pull-policy",
        severity=Severity.WARNING,
        description="The image pull policy is invalid or prevents image updates.",
        check=_check_pull_policy,
    ),
    SecurityRule(
        name="image-latest-tag",
        severity=Severity.WARNING,
        description="Mutable tags make deployments unreproducible.",
        check=_check_latest_tag,
    ),
    SecurityRule(
        name="missing-resource-limits",
        severity=Severity.WARNING,
        description="Containers without limits can exhaust node resources.",
        check=_check_resource_limits,
        applies_to_chart=False,
    ),
    SecurityRule(
        name="replica-count",
        severity=Severity.WARNING,
        description="A replica count of zero or less runs no pods.",
        check=_check_replica_count,
    ),
    SecurityRule(
        name="replica-count-invalid",
        severity=Severity.WARNING,
        description="The replica count cannot be parsed as an integer.",
        check=_check_replica_count_invalid,
    ),
    SecurityRule(
        name="rbac-wildcard",
        severity=Severity.WARNING,
        description="Wildcard RBAC rules grant far more access than needed.",
        check=_check_rbac_wildcards,
    ),
    SecurityRule(
        name="default-service-account",
        severity=Severity.WARNING,
        description="The default service account is shared by every pod.",
        check=_check_default_service_account,
    ),
    SecurityRule(
        name="run-as-root",
        severity=Severity.WARNING,
        description="Containers running as root widen the impact of a breakout.",
        check=_check_run_as_root,
    ),
)


# =============================================================================
# Engine
# =============================================================================


def validate_helm_chart(
    chart_source: str | None,
    values: Mapping[str, Any],
    rules: Iterable[SecurityRule] = RULES,
) -> SecurityReport:
    """Evaluate the rule set against Helm values and optional chart templates.

    Args:
        chart_source: Rendered chart templates as (multi-document) YAML, or
            an empty string when no chart is available
        values: Mapping of dotted key path to value, usually the output of
            ``parse_helm_values``
        rules: Rules to evaluate (defaults to :data:`RULES`)

    Returns:
        SecurityReport with errors, warnings and a one-line summary
    """
    rule_list = tuple(rules)
    report = SecurityReport()

    normalized = {str(k): _stringify(v) for k, v in values.items()}
    _evaluate(rule_list, normalized, report, chart=False)

    if chart_source and chart_source.strip():
        for document in _load_chart_documents(chart_source, report):
            _evaluate(rule_list, document, report, chart=True)

    report.summary = (
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s) found"
    )
    logger.debug(f"Security check complete: {report.summary}")
    return report


def _evaluate(
    rules: tuple[SecurityRule, ...],
    values: HelmValueMap,
    report: SecurityReport,
    *,
    chart: bool,
) -> None:
    for rule in rules:
        if chart and not rule.applies_to_chart:
            continue
        try:
            findings = rule.evaluate(values)
        except Exception as e:
            logger.exception(f"Security rule '{rule.name}' failed")
            report.add(
                Finding(
                    name="rule-failed",
                    message=f"Rule '{rule.name}' could not be evaluated: {type(e).__name__}",
                    description="A security rule failed; its result is unknown.",
                    severity=Severity.WARNING,
                )
            )
            continue
        for finding in findings:
            report.add(finding)


def _load_chart_documents(
    chart_source: str, report: SecurityReport
) -> list[HelmValueMap]:
    try:
        documents = list(yaml.safe_load_all(chart_source))
    except (yaml.YAMLError, RecursionError) as e:
        logger.warning(f"Chart source could not be parsed: {e}")
        report.add(_chart_unparseable("Chart templates are not valid YAML"))
        return []

    flattened: list[HelmValueMap] = []
    for index, document in enumerate(documents):
        if not isinstance(document, dict):
            continue
        try:
            flattened.append(flatten_values(document, prefix=f"document[{index}]"))
        except ValueError as e:
            logger.warning(f"Chart document {index} could not be flattened: {e}")
            report.add(
                _chart_unparseable("Chart templates are recursive or too large")
            )
            return []
    return flattened


def _chart_unparseable(message: str) -> Finding:
    return Finding(
        name="chart-unparseable",
        message=message,
        description="Templates that cannot be parsed were not checked.",
        severity=Severity.WARNING,
    )


def flatten_values(
    data: Any, prefix: str = "", *, max_entries: int = MAX_FLATTENED_ENTRIES
) -> HelmValueMap:
    """Flatten nested mappings and lists into dotted key paths.

    Raises:
        ValueError: If the data refers to itself (a recursive YAML alias)
            or expands to more than ``max_entries`` nodes

    Example:
        >>> flatten_values({"a": {"b": [1, True]}})
        {'a.b[0]': '1', 'a.b[1]': 'true'}
    """
    flat: HelmValueMap = {}
    visited = 0
    # (path, node, ids of the containers above it)
    stack: list[tuple[str, Any, frozenset[int]]] = [(prefix, data, frozenset())]

    while stack:
        path, node, ancestors = stack.pop()
        visited += 1
        if visited > max_entries:
            raise ValueError(f"values expand to more than {max_entries} entries")

        if isinstance(node, dict | list):
            if id(node) in ancestors:
                raise ValueError(f"recursive reference at '{path}'")
            inner = ancestors | {id(node)}
            if isinstance(node, dict):
                children = [
                    (f"{path}.{key}" if path else str(key), value)
                    for key, value in node.items()
                ]
            else:
                children = [(f"{path}[{i}]", value) for i, value in enumerate(node)]
            stack.extend((p, v, inner) for p, v in reversed(children))
        elif path:
            flat[path] = _stringify(node)

    return flat


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
