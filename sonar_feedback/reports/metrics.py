"""Duplication and project-wide metrics.

Functions:
    get_duplication(client, config, target)        -> MetricMap
    get_project_metrics(client, config, target)    -> MetricMap

Both query ``/api/measures/component`` and return ``{metric_key: value}``
with None for every metric the server did not report.
"""

from sonar_feedback.client import SonarClient
from sonar_feedback.config import Config
from sonar_feedback.measures import measures_to_map
from sonar_feedback.models import MetricMap, Target

# --------------------------------------------------------------------------- #
# Metric key lists
# --------------------------------------------------------------------------- #

#: New-code duplication metrics
DUPLICATION_METRICS: list[str] = [
    "new_duplicated_lines_density",
    "new_duplicated_lines",
    "new_duplicated_blocks",
]

#: Whole-project metrics
PROJECT_METRICS: list[str] = [
    "bugs",
    "vulnerabilities",
    "code_smells",
    "coverage",
    "line_coverage",
    "duplicated_lines_density",
    "complexity",
    "cognitive_complexity",
    "reliability_rating",
    "security_rating",
    "sqale_rating",
    "ncloc",
    "sqale_index",
]


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #

def get_duplication(client: SonarClient, config: Config, target: Target) -> MetricMap:
    """New-code duplication on *target*."""
    return _get_measures(client, config, DUPLICATION_METRICS, target.params(), "Measures")


def get_project_metrics(
    client: SonarClient, config: Config, target: Target | None = None
) -> MetricMap:
    """Whole-project metrics.

    Without a *target* the server's main branch is measured, which is what a
    pull request report shows alongside its new-code figures.
    """
    location = target.params() if target else {}
    return _get_measures(client, config, PROJECT_METRICS, location, "Metrics")


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #

def _get_measures(
    client: SonarClient,
    config: Config,
    metric_keys: list[str],
    location: dict[str, str],
    label: str,
) -> MetricMap:
    params = {
        "component": config.project_key,
        "metricKeys": ",".join(metric_keys),
        **location,
    }
    data = client.get("/api/measures/component", params=params, label=label)
    measures = (data.get("component") or {}).get("measures") or []
    return measures_to_map(measures, metric_keys)
