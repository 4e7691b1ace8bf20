"""Human-readable rendering of each report section, written with click.echo.

Only used in text mode; JSON mode serialises the models instead.
"""

import click

from sonar_feedback.models import (
    CoverageFileDetail,
    HotspotsResult,
    Issue,
    IssuesSummary,
    MetricMap,
    QualityGate,
    Severity,
)

RULE = "-" * 50
BANNER = "=" * 42
NOT_AVAILABLE = "N/A"

_SEVERITY_COLOURS = {
    Severity.BLOCKER: "red",
    Severity.CRITICAL: "red",
    Severity.MAJOR: "yellow",
    Severity.MINOR: "blue",
    Severity.INFO: "bright_black",
}

_PROBABILITY_COLOURS = {"HIGH": "red", "MEDIUM": "yellow", "LOW": "green"}

_PROJECT_METRIC_LABELS = {
    "bugs": "Bugs",
    "vulnerabilities": "Vulnerabilities",
    "code_smells": "Code Smells",
    "coverage": "Coverage",
    "line_coverage": "Line Coverage",
    "duplicated_lines_density": "Duplication Density",
    "complexity": "Cyclomatic Complexity",
    "cognitive_complexity": "Cognitive Complexity",
    "reliability_rating": "Reliability Rating",
    "security_rating": "Security Rating",
    "sqale_rating": "Maintainability Rating",
    "ncloc": "Lines of Code",
    "sqale_index": "Technical Debt",
}

_PERCENT_METRICS = {"coverage", "line_coverage", "duplicated_lines_density"}
_RATING_METRICS = {"reliability_rating", "security_rating", "sqale_rating"}


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def fmt(value, suffix: str = "") -> str:
    """Format a nullable number, None -> N/A."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value}{suffix}"


def rating_letter(value) -> str:
    """SonarCloud ratings are 1.0 (A) to 5.0 (E)."""
    if value is None:
        return NOT_AVAILABLE
    index = int(round(value)) - 1
    return "ABCDE"[index] if 0 <= index < 5 else str(value)


def debt_duration(minutes) -> str:
    """Technical debt is reported in minutes; show it as hours and minutes."""
    if minutes is None:
        return NOT_AVAILABLE
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins}min" if hours else f"{mins}min"


def severity_coloured(issue: Issue) -> str:
    colour = _SEVERITY_COLOURS.get(issue.level)
    return click.style(issue.severity, fg=colour) if colour else issue.severity


def probability_coloured(probability: str) -> str:
    colour = _PROBABILITY_COLOURS.get(probability.upper())
    return click.style(probability, fg=colour) if colour else probability


def section(title: str) -> None:
    click.echo(click.style(f"\n{title}", bold=True))
    click.echo(RULE)


def banner(title: str) -> None:
    click.echo(click.style(f"\n{BANNER}", bold=True))
    click.echo(click.style(title, bold=True))
    click.echo(click.style(BANNER, bold=True))


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def render_quality_gate(gate: QualityGate) -> None:
    section("Quality Gate Status")
    colour = "green" if gate.passed else "red"
    click.echo(f"Overall Status: {click.style(gate.status, fg=colour)}")

    failed = gate.failed_conditions
    if failed:
        click.echo(click.style("\nFailed Conditions:", fg="red"))
        for c in failed:
            click.echo(
                f"  - {c.metric_key}: {c.actual_value} "
                f"(threshold: {c.comparator} {c.error_threshold})"
            )


def render_issues(issues: list[Issue], summary: IssuesSummary, limit: int | None = None) -> None:
    section("Issues")
    click.echo(f"Total Issues: {summary.total}")
    click.echo(f"Effort Total: {summary.effort_total}")
    click.echo(f"Debt Total: {summary.debt_total}")

    if not issues:
        click.echo(click.style("No issues found.", fg="green"))
        return

    counts = ", ".join(f"{name}: {count}" for name, count in summary.by_severity.items() if count)
    if counts:
        click.echo(f"By Severity: {counts}")

    shown = issues if limit is None else issues[:limit]
    click.echo("")
    for issue in shown:
        click.echo(f"Issue Key: {issue.key}")
        click.echo(f"Rule: {issue.rule}")
        click.echo(f"Severity: {severity_coloured(issue)}")
        click.echo(f"File: {issue.file_path}")
        click.echo(f"Line: {issue.line or NOT_AVAILABLE}")
        click.echo(f"Message: {issue.message}")
        click.echo(f"Effort: {issue.effort or '0min'}")
        click.echo(f"Debt: {issue.debt or '0min'}")
        click.echo(f"Tags: {', '.join(issue.tags)}")
        click.echo(RULE)

    if len(shown) < len(issues):
        click.echo(f"Showing {len(shown)} of {len(issues)} issues (use --all to list every issue).")


def render_hotspots(result: HotspotsResult) -> None:
    section("Security Hotspots")
    click.echo(f"Total Security Hotspots: {result.total}")

    if not result.hotspots:
        click.echo(click.style("No security hotspots found.", fg="green"))
        return

    click.echo("")
    for hotspot in result.hotspots:
        click.echo(f"Hotspot Key: {hotspot.key}")
        click.echo(f"Rule: {hotspot.rule_key}")
        click.echo(f"Security Category: {hotspot.security_category}")
        click.echo(
            f"Vulnerability Probability: {probability_coloured(hotspot.vulnerability_probability)}"
        )
        click.echo(f"Status: {hotspot.status}")
        click.echo(f"File: {hotspot.file_path}")
        click.echo(f"Line: {hotspot.line or NOT_AVAILABLE}")
        click.echo(f"Message: {hotspot.message}")
        click.echo(RULE)


def render_duplication(duplication: MetricMap) -> None:
    section("Code Duplication")
    click.echo(f"Duplication Density: {fmt(duplication.get('new_duplicated_lines_density'), '%')}")
    click.echo(f"Duplicated Lines: {fmt(duplication.get('new_duplicated_lines'))}")
    click.echo(f"Duplicated Blocks: {fmt(duplication.get('new_duplicated_blocks'))}")


def render_coverage(coverage: MetricMap) -> None:
    section("Test Coverage")
    if all(v is None for v in coverage.values()):
        click.echo("Coverage data not available.")
        return
    click.echo(f"Coverage: {fmt(coverage.get('new_coverage'), '%')}")
    click.echo(f"Lines to Cover: {fmt(coverage.get('new_lines_to_cover'))}")
    click.echo(f"Uncovered Lines: {fmt(coverage.get('new_uncovered_lines'))}")


def render_coverage_details(files: list[CoverageFileDetail]) -> None:
    section("Files with Uncovered New Lines")
    if not files:
        click.echo(click.style("Every new line is covered.", fg="green"))
        return
    for f in files:
        click.echo(
            f"{f.uncovered:>5} uncovered / {fmt(f.lines_to_cover):>5} to cover "
            f"({fmt(f.coverage, '%')})  {f.path}"
        )


def render_project_metrics(metrics: MetricMap) -> None:
    section("Project Metrics")
    for key, label in _PROJECT_METRIC_LABELS.items():
        if key not in metrics:
            continue
        value = metrics[key]
        if key in _RATING_METRICS:
            shown = rating_letter(value)
        elif key == "sqale_index":
            shown = debt_duration(value)
        elif key in _PERCENT_METRICS:
            shown = fmt(value, "%")
        else:
            shown = fmt(value)
        click.echo(f"{label}: {shown}")
