"""Report orchestration.

``ReportBuilder`` fetches each metric group in a fixed order, folds the
results into a ReportAggregate and, in text mode, renders every section as
soon as it is fetched. Fetches are sequential; the first failure propagates
and aborts the report.

    builder = ReportBuilder(client, config, json_mode=False)
    aggregate = builder.pull_request_report("42", branch="feature/x")
    aggregate = builder.branch_report("main")
    listing = builder.issues_report("main", limit=20)
"""

from datetime import datetime, timezone
from typing import Callable

from sonar_feedback import render
from sonar_feedback.client import SonarClient
from sonar_feedback.config import Config
from sonar_feedback.models import IssueListing, ReportAggregate, ReportMeta, Target
from sonar_feedback.reports.coverage import get_coverage, get_coverage_details
from sonar_feedback.reports.hotspots import get_hotspots
from sonar_feedback.reports.issues import get_issues, sort_by_severity
from sonar_feedback.reports.metrics import get_duplication, get_project_metrics
from sonar_feedback.reports.quality_gate import get_quality_gate


class ReportBuilder:
    """Builds one report against one SonarCloud project."""

    def __init__(
        self,
        client: SonarClient,
        config: Config,
        json_mode: bool = False,
        trace: Callable[[str], None] | None = None,
    ) -> None:
        self.client = client
        self.config = config
        self.json_mode = json_mode
        self._trace = trace or (lambda message: None)

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def pull_request_report(self, pr_id: str, branch: str | None = None) -> ReportAggregate:
        """Quality gate, issues, hotspots, duplication and coverage of a PR.

        Text mode adds the per-file coverage ranking; JSON mode adds the
        project-wide metrics instead.
        """
        target = Target(pull_request=pr_id)
        aggregate = ReportAggregate(meta=self._meta(branch=branch, pull_request=pr_id))

        if not self.json_mode:
            render.banner(f"SonarCloud Analysis for PR #{pr_id}")

        self._fetch_quality_gate(aggregate, target)
        self._fetch_issues(aggregate, target)

        self._trace(f"Fetching security hotspots for {target}")
        aggregate.security_hotspots = get_hotspots(self.client, self.config, target)
        if not self.json_mode:
            render.render_hotspots(aggregate.security_hotspots)

        self._fetch_duplication(aggregate, target)
        self._fetch_coverage(aggregate, target)

        if self.json_mode:
            self._trace("Fetching project metrics")
            aggregate.project_metrics = get_project_metrics(self.client, self.config)
        else:
            self._trace(f"Fetching coverage details for {target}")
            aggregate.coverage_details = get_coverage_details(self.client, self.config, target)
            render.render_coverage_details(aggregate.coverage_details)
            render.banner("Analysis Complete")

        return aggregate

    def branch_report(self, branch: str) -> ReportAggregate:
        """Quality gate, issues, duplication, coverage and project metrics of a branch."""
        target = Target(branch=branch)
        aggregate = ReportAggregate(meta=self._meta(branch=branch))

        if not self.json_mode:
            render.banner(f"SonarCloud Metrics for branch '{branch}'")

        self._fetch_quality_gate(aggregate, target)
        self._fetch_issues(aggregate, target)
        self._fetch_duplication(aggregate, target)
        self._fetch_coverage(aggregate, target)

        self._trace(f"Fetching project metrics for {target}")
        aggregate.project_metrics = get_project_metrics(self.client, self.config, target)
        if not self.json_mode:
            render.render_project_metrics(aggregate.project_metrics)
            render.banner("Analysis Complete")

        return aggregate

    def issues_report(self, branch: str, limit: int | None = None) -> IssueListing:
        """Unresolved issues of a branch, most severe first.

        *limit* caps the listed issues (None lists all); the summary always
        covers everything fetched.
        """
        target = Target(branch=branch)
        self._trace(f"Fetching issues for {target}")
        issues, summary = get_issues(self.client, self.config, target)
        issues = sort_by_severity(issues)

        if not self.json_mode:
            render.banner(f"SonarCloud Issues for branch '{branch}'")
            render.render_issues(issues, summary, limit=limit)

        return IssueListing(
            meta=self._meta(branch=branch),
            issues=issues if limit is None else issues[:limit],
            issues_summary=summary,
        )

    # ------------------------------------------------------------------
    # Metric groups shared by the flows
    # ------------------------------------------------------------------

    def _fetch_quality_gate(self, aggregate: ReportAggregate, target: Target) -> None:
        self._trace(f"Fetching quality gate for {target}")
        aggregate.quality_gate = get_quality_gate(self.client, self.config, target)
        if not self.json_mode:
            render.render_quality_gate(aggregate.quality_gate)

    def _fetch_issues(self, aggregate: ReportAggregate, target: Target) -> None:
        self._trace(f"Fetching issues for {target}")
        aggregate.issues, aggregate.issues_summary = get_issues(self.client, self.config, target)
        if not self.json_mode:
            render.render_issues(aggregate.issues, aggregate.issues_summary)

    def _fetch_duplication(self, aggregate: ReportAggregate, target: Target) -> None:
        self._trace(f"Fetching duplication for {target}")
        aggregate.duplication = get_duplication(self.client, self.config, target)
        if not self.json_mode:
            render.render_duplication(aggregate.duplication)

    def _fetch_coverage(self, aggregate: ReportAggregate, target: Target) -> None:
        self._trace(f"Fetching coverage for {target}")
        aggregate.coverage = get_coverage(self.client, self.config, target)
        if not self.json_mode:
            render.render_coverage(aggregate.coverage)

    def _meta(self, branch: str | None = None, pull_request: str | None = None) -> ReportMeta:
        return ReportMeta(
            project_key=self.config.project_key,
            organization=self.config.organization,
            branch=branch,
            pull_request=pull_request,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
