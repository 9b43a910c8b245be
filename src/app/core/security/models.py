"""Data types shared by the input validator, value parser and rule engine."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import overload

HelmValueMap = dict[str, str]


@dataclass(frozen=True)
class RepositorySpec:
    """A Helm repository reference parsed from ``"<name> <https-url>"``.

    Attributes:
        name: Repository alias, restricted to ``[a-zA-Z0-9_-]``
        url: Absolute ``https`` URL of the chart repository
    """

    name: str
    url: str


@dataclass(frozen=True)
class ValidatedCommandLine:
    """Ordered argument tokens that passed input validation.

    Each token is handed to the process invoker as exactly one argv entry.
    """

    tokens: tuple[str, ...]

    def __iter__(self) -> Iterator[str]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    @overload
    def __getitem__(self, index: int) -> str: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[str, ...]: ...

    def __getitem__(self, index: int | slice) -> str | tuple[str, ...]:
        return self.tokens[index]

    def as_text(self) -> str:
        """Render the tokens for display only (never for execution)."""
        return " ".join(self.tokens)


class Severity(str, Enum):
    """Severity of a security finding."""

    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Finding:
    """One security-relevant condition detected in a value mapping."""

    name: str
    message: str
    description: str
    severity: Severity


@dataclass
class SecurityReport:
    """Categorized findings produced by one security check.

    Errors are advisory: they are surfaced to the caller but never stop a
    deployment.
    """

    errors: list[Finding] = field(default_factory=list)
    warnings: list[Finding] = field(default_factory=list)
    summary: str = ""

    @property
    def has_errors(self) -> bool:
        """Check if any error-level finding was recorded."""
        return bool(self.errors)

    @property
    def has_warnings(self) -> bool:
        """Check if any warning-level finding was recorded."""
        return bool(self.warnings)

    @property
    def is_clean(self) -> bool:
        """Check if the report has no findings at all."""
        return not self.errors and not self.warnings

    def add(self, finding: Finding) -> None:
        """Append a finding to the list matching its severity."""
        if finding.severity == Severity.ERROR:
            self.errors.append(finding)
        else:
            self.warnings.append(finding)

    def findings(self) -> list[Finding]:
        """All findings, errors first."""
        return [*self.errors, *self.warnings]
