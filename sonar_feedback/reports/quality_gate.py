"""Quality gate status: ``/api/qualitygates/project_status``."""

from sonar_feedback.client import SonarClient
from sonar_feedback.config import Config
from sonar_feedback.models import QualityGate, QualityGateCondition, Target


def get_quality_gate(client: SonarClient, config: Config, target: Target) -> QualityGate:
    params = {
        "projectKey": config.project_key,
        **target.params(),
    }
    data = client.get("/api/qualitygates/project_status", params=params, label="Quality Gate")

    status = data.get("projectStatus") or {}
    return QualityGate(
        status=status.get("status", "NONE"),
        conditions=[QualityGateCondition.from_api(c) for c in status.get("conditions") or []],
    )
