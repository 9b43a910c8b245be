"""Extraction of ``--set`` style assignments from a validated install line."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from src.app.core.security.models import HelmValueMap

VALUE_FLAGS = frozenset({"--set", "--set-string", "--set-literal"})
NAMESPACE_FLAGS = frozenset({"-n", "--namespace"})

# Flags of `helm upgrade --install` that consume the following token.
_FLAGS_WITH_ARGUMENT = frozenset(
    {
        *VALUE_FLAGS,
        *NAMESPACE_FLAGS,
        "-f",
        "--values",
        "--version",
        "--timeout",
        "--kube-context",
        "--kubeconfig",
        "--description",
        "--post-renderer",
        "--repo",
        "--set-file",
        "--set-json",
    }
)


def parse_helm_values(tokens: Iterable[str]) -> HelmValueMap:
    """Collect key/value assignments from value-setting flags.

    Recognized forms are ``--set key=value``, ``--set=key=value`` and
    ``--set key value``. One assignment token may hold several
    comma-separated assignments. Later assignments overwrite earlier ones.
    Tokens that are not value flags are ignored.

    Args:
        tokens: Validated install line tokens

    Returns:
        Mapping of dotted key path to string value (empty if none found)
    """
    items = list(tokens)
    values: HelmValueMap = {}

    i = 0
    while i < len(items):
        token = items[i]
        flag, sep, inline = token.partition("=")

        if sep and flag in VALUE_FLAGS:
            _assign(values, inline)
            i += 1
            continue

        if token in VALUE_FLAGS and i + 1 < len(items):
            assignment = items[i + 1]
            if "=" in assignment:
                _assign(values, assignment)
                i += 2
                continue
            if i + 2 < len(items) and not items[i + 2].startswith("-"):
                values[assignment] = items[i + 2]
                i += 3
                continue
            i += 2
            continue

        i += 1

    return values


def _assign(values: HelmValueMap, assignment: str) -> None:
    key: str | None = None
    for segment in assignment.split(","):
        name, sep, value = segment.partition("=")
        if sep and name:
            key = name
            values[key] = value
        elif key is not None:
            # No '=' in this segment: it belongs to the previous value.
            values[key] = f"{values[key]},{segment}"


def to_set_arguments(values: Mapping[str, str]) -> list[str]:
    """Serialize a value map back into ``--set key=value`` arguments."""
    arguments: list[str] = []
    for key, value in values.items():
        arguments.extend(["--set", f"{key}={value}"])
    return arguments


def extract_namespace(tokens: Iterable[str], default: str) -> str:
    """Return the ``-n``/``--namespace`` value, last one wins."""
    items = list(tokens)
    namespace = default
    for i, token in enumerate(items):
        flag, sep, inline = token.partition("=")
        if sep and flag in NAMESPACE_FLAGS and inline:
            namespace = inline
        elif token in NAMESPACE_FLAGS and i + 1 < len(items):
            namespace = items[i + 1]
    return namespace


def extract_release(tokens: Iterable[str]) -> str | None:
    """Return the first positional token (the release name), if any."""
    items = list(tokens)
    i = 0
    while i < len(items):
        token = items[i]
        if token.startswith("-"):
            if "=" not in token and token in _FLAGS_WITH_ARGUMENT:
                i += 2
            else:
                i += 1
            continue
        return token
    return None
