"""Unit tests for the security rule engine."""

import pytest

from src.app.core.security import (
    Severity,
    SecurityRule,
    flatten_values,
    validate_helm_chart,
)

LIMITS = {"resources.limits.cpu": "500m"}


def _names(findings) -> set[str]:
    return {f.name for f in findings}


class TestErrorRules:
    def test_privileged_container(self):
        report = validate_helm_chart("", {**LIMITS, "securityContext.privileged": "true"})

        assert _names(report.errors) == {"privileged-container"}
        assert report.errors[0].severity == Severity.ERROR

    def test_false_flag_is_not_reported(self):
        report = validate_helm_chart("", {**LIMITS, "securityContext.privileged": "false"})
        assert report.is_clean

    def test_host_namespaces(self):
        report = validate_helm_chart(
            "",
            {**LIMITS, "hostNetwork": "true", "hostPID": "yes", "hostIPC": "1"},
        )
        assert _names(report.errors) == {"host-network", "host-pid", "host-ipc"}

    def test_privilege_escalation_matches_case_insensitively(self):
        report = validate_helm_chart(
            "", {**LIMITS, "containers[0].securityContext.AllowPrivilegeEscalation": "TRUE"}
        )
        assert _names(report.errors) == {"privilege-escalation"}

    def test_sensitive_host_path(self):
        report = validate_helm_chart(
            "", {**LIMITS, "volumes[0].hostPath.path": "/var/run/docker.sock"}
        )

        assert _names(report.errors) == {"host-path-sensitive"}
        assert "host-path-volume" not in _names(report.warnings)

    @pytest.mark.parametrize("path", ["/tmp/../etc", "//etc", "/./proc", "/data/../../"])
    def test_sensitive_host_path_is_normalized(self, path: str):
        report = validate_helm_chart("", {**LIMITS, "volumes[0].hostPath.path": path})

        assert _names(report.errors) == {"host-path-sensitive"}
        assert "host-path-volume" not in _names(report.warnings)

    def test_dangerous_capability(self):
        report = validate_helm_chart(
            "", {**LIMITS, "securityContext.capabilities.add": "NET_BIND_SERVICE,CAP_SYS_ADMIN"}
        )

        assert _names(report.errors) == {"dangerous-capability"}
        assert "SYS_ADMIN" in report.errors[0].message


class TestWarningRules:
    def test_missing_resource_limits(self):
        report = validate_helm_chart("", {})

        assert _names(report.warnings) == {"missing-resource-limits"}
        assert report.summary == "0 error(s), 1 warning(s) found"

    def test_non_sensitive_host_path(self):
        report = validate_helm_chart("", {**LIMITS, "hostPath": "/data/cache"})
        assert _names(report.warnings) == {"host-path-volume"}

    def test_pull_policy_never_and_invalid(self):
        never = validate_helm_chart("", {**LIMITS, "image.pullPolicy": "Never"})
        invalid = validate_helm_chart("", {**LIMITS, "image.pullPolicy": "Sometimes"})

        assert _names(never.warnings) == {"image-pull-policy"}
        assert _names(invalid.warnings) == {"image-pull-policy"}
        assert not never.has_errors

    def test_latest_tag(self):
        report = validate_helm_chart("", {**LIMITS, "image.tag": "latest"})
        assert _names(report.warnings) == {"image-latest-tag"}

    def test_replica_counts(self):
        zero = validate_helm_chart("", {**LIMITS, "replicaCount": "0"})
        bogus = validate_helm_chart("", {**LIMITS, "replicaCount": "three"})

        assert _names(zero.warnings) == {"replica-count"}
        assert _names(bogus.warnings) == {"replica-count-invalid"}

    def test_rbac_wildcard(self):
        report = validate_helm_chart("", {**LIMITS, "rbac.rules[0].verbs": "get,*"})
        assert _names(report.warnings) == {"rbac-wildcard"}

    def test_default_service_account_and_root_user(self):
        report = validate_helm_chart(
            "",
            {
                **LIMITS,
                "serviceAccount.name": "default",
                "securityContext.runAsUser": "0",
            },
        )
        assert _names(report.warnings) == {"default-service-account", "run-as-root"}

    def test_invalid_boolean(self):
        report = validate_helm_chart("", {**LIMITS, "hostNetwork": "maybe"})

        assert _names(report.warnings) == {"invalid-boolean"}
        assert not report.has_errors


class TestEngine:
    def test_one_value_can_trigger_several_rules(self):
        report = validate_helm_chart(
            "", {"securityContext.privileged": "true", "image.tag": "latest"}
        )

        assert _names(report.errors) == {"privileged-container"}
        assert _names(report.warnings) == {"image-latest-tag", "missing-resource-limits"}
        assert report.summary == "1 error(s), 2 warning(s) found"

    def test_does_not_mutate_values(self):
        values = {"securityContext.privileged": "true"}
        validate_helm_chart("", values)
        assert values == {"securityContext.privileged": "true"}

    def test_failing_rule_becomes_warning(self):
        def boom(values):
            raise RuntimeError("broken")

        rule = SecurityRule(
            name="boom", severity=Severity.ERROR, description="d", check=boom
        )
        report = validate_helm_chart("", {}, rules=[rule])

        assert _names(report.warnings) == {"rule-failed"}
        assert not report.has_errors

    def test_chart_documents_are_checked(self):
        chart = """
apiVersion: apps/v1
kind: Deployment
spec:
  template:
    spec:
      hostNetwork: true
      containers:
        - name: app
          securityContext:
            privileged: true
---
apiVersion: v1
kind: Service
"""
        report = validate_helm_chart(chart, LIMITS)

        assert _names(report.errors) == {"host-network", "privileged-container"}

    def test_unparseable_chart_is_a_warning(self):
        report = validate_helm_chart("key: [unclosed", LIMITS)
        assert _names(report.warnings) == {"chart-unparseable"}

    def test_recursive_alias_chart_is_a_warning(self):
        report = validate_helm_chart("a: &x [*x]\n", LIMITS)

        assert _names(report.warnings) == {"chart-unparseable"}
        assert report.errors == []

    def test_exponential_alias_chart_is_a_warning(self):
        lines = ["l0: &l0 [1, 1, 1, 1, 1, 1, 1, 1, 1, 1]"]
        for level in range(1, 6):
            refs = ", ".join([f"*l{level - 1}"] * 10)
            lines.append(f"l{level}: &l{level} [{refs}]")

        report = validate_helm_chart("\n".join(lines), LIMITS)

        assert _names(report.warnings) == {"chart-unparseable"}

    def test_deeply_nested_chart_is_a_warning(self):
        chart = "a: " + "[" * 5000 + "]" * 5000

        report = validate_helm_chart(chart, LIMITS)

        assert _names(report.warnings) == {"chart-unparseable"}

    def test_findings_lists_errors_first(self):
        report = validate_helm_chart("", {"hostPID": "true"})
        assert [f.severity for f in report.findings()] == [
            Severity.ERROR,
            Severity.WARNING,
        ]


def test_flatten_values():
    assert flatten_values({"a": {"b": [1, True]}, "c": None}) == {
        "a.b[0]": "1",
        "a.b[1]": "true",
        "c": "",
    }


def test_flatten_values_rejects_self_reference():
    data: dict = {"a": []}
    data["a"].append(data)

    with pytest.raises(ValueError, match="recursive"):
        flatten_values(data)


def test_flatten_values_shared_subtree_is_not_recursive():
    shared = {"x": 1}
    assert flatten_values({"a": shared, "b": shared}) == {"a.x": "1", "b.x": "1"}


def test_flatten_values_caps_expansion():
    with pytest.raises(ValueError, match="more than 5 entries"):
        flatten_values({"a": list(range(10))}, max_entries=5)
