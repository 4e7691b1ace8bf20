"""Helpers for SonarCloud "measure" records.

A measure looks like one of::

    {"metric": "coverage", "value": "85.5"}
    {"metric": "new_coverage", "periods": [{"index": 1, "value": "85.5"}]}

For new-code queries the first period holds the value we want; otherwise the
absolute ``value`` is used. Everything here is tolerant of malformed input
and degrades to ``None``.
"""

import math
from typing import Any


def measure_value(measure: dict) -> str | None:
    """Return the raw string value of *measure*, ``periods[0]`` first."""
    periods = measure.get("periods")
    if isinstance(periods, list) and periods and isinstance(periods[0], dict):
        value = periods[0].get("value")
        if value is not None:
            return value
    return measure.get("value")


def to_number(raw: Any) -> int | float | None:
    """Parse a SonarCloud numeric string. Non-numeric or non-finite -> None.

    Accepts what float() accepts, including exponents and underscore digit
    separators ("1_000"). NaN and infinity in any case map to None, and so
    does anything float() rejects, such as "".
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    # Whole numbers come back as int (e.g. "88.0" -> 88)
    return int(number) if number.is_integer() else number


def extract_number(measures: list[dict] | None, metric_key: str) -> int | float | None:
    """Return the numeric value of *metric_key* in *measures*, or None.

    The first measure whose ``metric`` matches wins. Never raises.
    """
    for measure in measures or []:
        if isinstance(measure, dict) and measure.get("metric") == metric_key:
            return to_number(measure_value(measure))
    return None


def measures_to_map(measures: list[dict] | None, metric_keys: list[str]) -> dict[str, int | float | None]:
    """Build ``{metric_key: number | None}`` for every key in *metric_keys*."""
    return {key: extract_number(measures, key) for key in metric_keys}
