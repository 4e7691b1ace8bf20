"""Security hotspot report: ``/api/hotspots/search`` for a pull request."""

from sonar_feedback.client import SonarClient
from sonar_feedback.config import Config
from sonar_feedback.models import Hotspot, HotspotsResult, Target, relative_path


def get_hotspots(client: SonarClient, config: Config, target: Target) -> HotspotsResult:
    """Return the security hotspots flagged on *target*."""
    params = {
        "projectKey": config.project_key,
        **target.params(),
    }
    data = client.get("/api/hotspots/search", params=params, label="Hotspots")

    raw_hotspots = data.get("hotspots") or []
    hotspots = [
        Hotspot(
            key=raw.get("key", ""),
            rule_key=raw.get("ruleKey", ""),
            security_category=raw.get("securityCategory", ""),
            vulnerability_probability=raw.get("vulnerabilityProbability", ""),
            status=raw.get("status", ""),
            component=raw.get("component", ""),
            file_path=relative_path(raw.get("component", ""), config.project_key),
            line=raw.get("line"),
            message=raw.get("message", ""),
        )
        for raw in raw_hotspots
    ]
    total = (data.get("paging") or {}).get("total", len(hotspots))
    return HotspotsResult(total=total, hotspots=hotspots)
