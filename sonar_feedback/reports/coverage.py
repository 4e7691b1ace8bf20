"""Coverage report generators.

Functions:
    get_coverage(client, config, target)            -> MetricMap
    get_coverage_details(client, config, target)    -> list[CoverageFileDetail]
    rank_uncovered_files(tree, project_key)         -> list[CoverageFileDetail]

``get_coverage`` queries ``/api/measures/component`` for the new-code coverage
figures; ``get_coverage_details`` queries ``/api/measures/component_tree`` and
ranks files by the number of new lines left uncovered.
"""

from sonar_feedback.client import SonarClient
from sonar_feedback.config import Config
from sonar_feedback.measures import extract_number, measures_to_map
from sonar_feedback.models import CoverageFileDetail, MetricMap, Target, relative_path

# --------------------------------------------------------------------------- #
# Metric key lists
# --------------------------------------------------------------------------- #

#: New-code coverage metrics, for the project and for each file
COVERAGE_METRICS: list[str] = [
    "new_coverage",
    "new_lines_to_cover",
    "new_uncovered_lines",
]


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #

def get_coverage(client: SonarClient, config: Config, target: Target) -> MetricMap:
    """Return ``{metric: value}`` for every key in COVERAGE_METRICS.

    Metrics the server did not return map to None.
    """
    params = {
        "component": config.project_key,
        "metricKeys": ",".join(COVERAGE_METRICS),
        **target.params(),
    }
    data = client.get("/api/measures/component", params=params, label="Coverage")
    measures = (data.get("component") or {}).get("measures") or []
    return measures_to_map(measures, COVERAGE_METRICS)


def coverage_details_params(config: Config, target: Target) -> dict[str, str]:
    """Query parameters for the per-file new-code coverage tree."""
    return {
        "component": config.project_key,
        "metricKeys": ",".join(COVERAGE_METRICS),
        **target.params(),
        "organization": config.organization,
        "qualifiers": "FIL",
        "ps": str(config.coverage_page_size),
        # new-code period values, sorted by uncovered lines, worst first
        "metricPeriod": "1",
        "additionalFields": "metrics",
        "s": "metricPeriod",
        "metricSort": "new_uncovered_lines",
        "metricPeriodSort": "1",
        "asc": "false",
    }


def get_coverage_details(
    client: SonarClient, config: Config, target: Target
) -> list[CoverageFileDetail]:
    """Fetch the file-level component tree and rank files by uncovered lines."""
    data = client.get(
        "/api/measures/component_tree",
        params=coverage_details_params(config, target),
        label="Coverage Details",
    )
    return rank_uncovered_files(data, config.project_key)


def rank_uncovered_files(tree: dict, project_key: str) -> list[CoverageFileDetail]:
    """Rank the files of a component tree response by new uncovered lines.

    * ``path`` is the component ``path`` when present, else its key with the
      ``<project_key>:`` prefix removed.
    * A missing ``new_uncovered_lines`` counts as 0, so such files are
      dropped; ``new_lines_to_cover`` and ``new_coverage`` stay None when
      missing.
    * Only files with at least one uncovered line are kept, sorted by
      uncovered count, highest first. Equal counts keep their input order.
    """
    files: list[CoverageFileDetail] = []
    for component in tree.get("components") or []:
        measures = component.get("measures") or []
        uncovered = extract_number(measures, "new_uncovered_lines") or 0
        if uncovered <= 0:
            continue
        files.append(CoverageFileDetail(
            path=component.get("path") or relative_path(component.get("key", ""), project_key),
            uncovered=uncovered,
            lines_to_cover=extract_number(measures, "new_lines_to_cover"),
            coverage=extract_number(measures, "new_coverage"),
        ))

    return sorted(files, key=lambda f: f.uncovered, reverse=True)
