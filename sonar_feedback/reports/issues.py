"""Issue report generators.

Functions:
    get_issues(client, config, target)   -> (list[Issue], IssuesSummary)
    sort_by_severity(issues)             -> list[Issue]
"""

from typing import Any

from sonar_feedback.client import PAGE_SIZE, SonarClient
from sonar_feedback.config import Config
from sonar_feedback.models import Issue, IssuesSummary, Severity, Target, relative_path


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_issues(
    client: SonarClient, config: Config, target: Target
) -> tuple[list[Issue], IssuesSummary]:
    """Return the unresolved issues of *target* and their summary.

    A single page of up to PAGE_SIZE issues is fetched; ``summary.total`` is
    the server-side total and may exceed the number of issues returned.
    """
    params = {
        "componentKeys": config.project_key,
        **target.params(),
        "organization":  config.organization,
        "resolved":      "false",
        "ps":            PAGE_SIZE,
    }
    data = client.get("/api/issues/search", params=params, label="Issues", auth="basic")

    issues = [_extract_issue(raw, config.project_key) for raw in data.get("issues") or []]
    summary = _build_summary(data, issues)
    return issues, summary


def sort_by_severity(issues: list[Issue]) -> list[Issue]:
    """Most severe first; issues of equal severity keep the server order."""
    return sorted(issues, key=lambda i: i.level.value, reverse=True)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract_issue(raw: dict[str, Any], project_key: str) -> Issue:
    """Keep only the fields we care about from a raw SonarCloud issue."""
    component = raw.get("component", "")
    return Issue(
        key=raw.get("key", ""),
        rule=raw.get("rule", ""),
        severity=raw.get("severity", ""),
        type=raw.get("type"),
        component=component,
        file_path=relative_path(component, project_key),
        line=raw.get("line"),
        message=raw.get("message", ""),
        effort=raw.get("effort"),
        debt=raw.get("debt"),
        tags=raw.get("tags") or [],
        creation_date=raw.get("creationDate"),
        update_date=raw.get("updateDate"),
    )


def _build_summary(data: dict, issues: list[Issue]) -> IssuesSummary:
    by_severity = {s.name: 0 for s in Severity.ordered()}
    for issue in issues:
        by_severity[issue.level.bucket.name] += 1

    return IssuesSummary(
        total=data.get("total", len(issues)),
        effort_total=data.get("effortTotal") or 0,
        debt_total=data.get("debtTotal") or 0,
        by_severity=by_severity,
    )
