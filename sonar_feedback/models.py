"""Data models for SonarCloud feedback reports.

Contains dataclasses used to structure and serialize the JSON output:
    - Target               (pull request or branch a report is scoped to)
    - Severity             (ordered issue severity, with an UNKNOWN variant)
    - QualityGate          (+ QualityGateCondition)
    - Issue / IssuesSummary
    - Hotspot / HotspotsResult
    - CoverageFileDetail
    - ReportMeta / ReportAggregate / IssueListing

``to_dict()`` methods produce the camelCase keys of the JSON document.
"""

import enum
import warnings
from dataclasses import dataclass, field
from typing import Any

MetricMap = dict[str, int | float | None]


@dataclass(frozen=True)
class Target:
    """What a report is scoped to: a pull request or a branch."""

    pull_request: str | None = None
    branch: str | None = None

    def __post_init__(self) -> None:
        if bool(self.pull_request) == bool(self.branch):
            raise ValueError("Provide exactly one of pull_request or branch.")

    def params(self) -> dict[str, str]:
        """Query parameters selecting this target."""
        if self.pull_request:
            return {"pullRequest": self.pull_request}
        return {"branch": self.branch}

    def __str__(self) -> str:
        return f"PR #{self.pull_request}" if self.pull_request else f"branch '{self.branch}'"


class Severity(enum.Enum):
    BLOCKER = 5
    CRITICAL = 4
    MAJOR = 3
    MINOR = 2
    INFO = 1
    UNKNOWN = 0

    @classmethod
    def ordered(cls) -> list["Severity"]:
        """The five real levels, most severe first."""
        return [cls.BLOCKER, cls.CRITICAL, cls.MAJOR, cls.MINOR, cls.INFO]

    @classmethod
    def from_value(cls, value: str | None) -> "Severity":
        """Map a SonarCloud severity string, case-insensitively.

        Unrecognised values become UNKNOWN and are warned about once per value.
        """
        name = str(value).upper()
        if name in cls.__members__ and name != "UNKNOWN":
            return cls[name]
        warnings.warn(f"Unknown issue severity '{value}', counted as INFO", UserWarning, stacklevel=3)
        return cls.UNKNOWN

    @property
    def bucket(self) -> "Severity":
        """Summary bucket: UNKNOWN is counted as INFO."""
        return Severity.INFO if self is Severity.UNKNOWN else self


@dataclass
class QualityGateCondition:
    status: str
    metric_key: str
    actual_value: str | None = None
    comparator: str | None = None
    error_threshold: str | None = None

    @classmethod
    def from_api(cls, raw: dict) -> "QualityGateCondition":
        return cls(
            status=raw.get("status", ""),
            metric_key=raw.get("metricKey", ""),
            actual_value=raw.get("actualValue"),
            comparator=raw.get("comparator"),
            error_threshold=raw.get("errorThreshold"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "metricKey": self.metric_key,
            "actualValue": self.actual_value,
            "comparator": self.comparator,
            "errorThreshold": self.error_threshold,
        }


@dataclass
class QualityGate:
    status: str
    conditions: list[QualityGateCondition] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == "OK"

    @property
    def failed_conditions(self) -> list[QualityGateCondition]:
        return [c for c in self.conditions if c.status == "ERROR"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "conditions": [c.to_dict() for c in self.conditions],
        }


@dataclass
class Issue:
    key: str
    rule: str
    severity: str
    component: str
    file_path: str
    message: str
    type: str | None = None
    line: int | None = None
    effort: str | None = None
    debt: str | None = None
    tags: list[str] = field(default_factory=list)
    creation_date: str | None = None
    update_date: str | None = None
    # Parsed once from severity; not serialised
    level: Severity = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.level = Severity.from_value(self.severity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "rule": self.rule,
            "severity": self.severity,
            "type": self.type,
            "component": self.component,
            "filePath": self.file_path,
            "line": self.line,
            "message": self.message,
            "effort": self.effort,
            "debt": self.debt,
            "tags": list(self.tags),
            "creationDate": self.creation_date,
            "updateDate": self.update_date,
        }


@dataclass
class IssuesSummary:
    total: int
    effort_total: int = 0
    debt_total: int = 0
    by_severity: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "effortTotal": self.effort_total,
            "debtTotal": self.debt_total,
            "bySeverity": dict(self.by_severity),
        }


@dataclass
class Hotspot:
    key: str
    rule_key: str
    security_category: str
    vulnerability_probability: str
    status: str
    component: str
    file_path: str
    message: str
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "ruleKey": self.rule_key,
            "securityCategory": self.security_category,
            "vulnerabilityProbability": self.vulnerability_probability,
            "status": self.status,
            "component": self.component,
            "filePath": self.file_path,
            "line": self.line,
            "message": self.message,
        }


@dataclass
class HotspotsResult:
    total: int
    hotspots: list[Hotspot] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"total": self.total, "hotspots": [h.to_dict() for h in self.hotspots]}


@dataclass(frozen=True)
class CoverageFileDetail:
    path: str
    uncovered: int
    lines_to_cover: int | float | None = None
    coverage: int | float | None = None


@dataclass
class ReportMeta:
    project_key: str
    organization: str
    generated_at: str
    branch: str | None = None
    pull_request: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectKey": self.project_key,
            "organization": self.organization,
            "branch": self.branch,
            "pullRequest": self.pull_request,
            "generatedAt": self.generated_at,
        }


@dataclass
class ReportAggregate:
    """Root of the JSON document for the ``pr`` and ``metrics`` commands."""

    meta: ReportMeta
    quality_gate: QualityGate | None = None
    issues: list[Issue] = field(default_factory=list)
    issues_summary: IssuesSummary | None = None
    security_hotspots: HotspotsResult | None = None
    duplication: MetricMap = field(default_factory=dict)
    coverage: MetricMap = field(default_factory=dict)
    project_metrics: MetricMap = field(default_factory=dict)
    # Text mode only; not part of the JSON document
    coverage_details: list[CoverageFileDetail] = field(default_factory=list)

    @property
    def metrics(self) -> MetricMap:
        """Project-wide metrics overlaid with the new-code coverage metrics."""
        return {**self.project_metrics, **self.coverage}

    def to_dict(self) -> dict[str, Any]:
        return {
            "meta": self.meta.to_dict(),
            "qualityGate": self.quality_gate.to_dict() if self.quality_gate else None,
            "issues": [i.to_dict() for i in self.issues],
            "issuesSummary": self.issues_summary.to_dict() if self.issues_summary else None,
            "securityHotspots": (
                self.security_hotspots.to_dict() if self.security_hotspots else None
            ),
            "duplication": dict(self.duplication),
            "metrics": self.metrics,
        }


@dataclass
class IssueListing:
    """Root of the JSON document for the ``issues`` command."""

    meta: ReportMeta
    issues: list[Issue]
    issues_summary: IssuesSummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "meta": self.meta.to_dict(),
            "issues": [i.to_dict() for i in self.issues],
            "issuesSummary": self.issues_summary.to_dict(),
        }


def relative_path(component: str, project_key: str) -> str:
    """Strip the ``<project_key>:`` prefix from a component key."""
    prefix = f"{project_key}:"
    return component[len(prefix):] if component.startswith(prefix) else component
