"""Configuration loading and validation.

Usage:
    config = load()                                 # raises ConfigError on bad config
    config = load("ci/sonar-feedback.yaml")         # explicit file must exist
    generate_template("sonar-feedback.yaml")        # writes example file to disk

Values come from an optional YAML file and are overridden by environment
variables (SONAR_URL, SONAR_TOKEN, SONAR_PROJECT_KEY, SONAR_ORGANIZATION,
SONAR_COVERAGE_PAGE_SIZE).
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from sonar_feedback.client import PAGE_SIZE

DEFAULT_CONFIG_PATH = "sonar-feedback.yaml"
DEFAULT_URL = "https://sonarcloud.io"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Config:
    token: str
    project_key: str
    organization: str
    url: str = DEFAULT_URL
    coverage_page_size: int = PAGE_SIZE


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | None = None) -> Config:
    """Load and validate configuration.

    When *config_path* is None the default ``sonar-feedback.yaml`` is read if
    it exists; an explicitly requested file must exist.

    Raises:
        ConfigError: if the file is malformed or required values are absent.
    """
    raw = _read_file(config_path)

    server = raw.get("server") or {}
    project = raw.get("project") or {}
    coverage = raw.get("coverage") or {}

    url = os.environ.get("SONAR_URL") or server.get("url") or DEFAULT_URL
    token = os.environ.get("SONAR_TOKEN") or server.get("token") or ""
    project_key = os.environ.get("SONAR_PROJECT_KEY") or project.get("key") or ""
    organization = os.environ.get("SONAR_ORGANIZATION") or project.get("organization") or ""
    page_size = os.environ.get("SONAR_COVERAGE_PAGE_SIZE") or coverage.get("page_size") or PAGE_SIZE

    errors: list[str] = []
    if not str(token).strip():
        errors.append("  - SONAR_TOKEN environment variable is not set (or 'server.token')")
    if not str(project_key).strip():
        errors.append("  - SONAR_PROJECT_KEY environment variable is not set (or 'project.key')")
    if not str(organization).strip():
        errors.append(
            "  - SONAR_ORGANIZATION environment variable is not set (or 'project.organization')"
        )
    try:
        page_size = int(page_size)
        if page_size <= 0:
            raise ValueError
    except (TypeError, ValueError):
        errors.append(f"  - coverage page size must be a positive integer, got {page_size!r}")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))

    return Config(
        token=str(token).strip(),
        project_key=str(project_key).strip(),
        organization=str(organization).strip(),
        url=str(url).strip(),
        coverage_page_size=page_size,
    )


def _read_file(config_path: str | None) -> dict:
    path = Path(config_path or DEFAULT_CONFIG_PATH)

    if not path.exists():
        if config_path is None:
            return {}
        raise ConfigError(
            f"Config file not found: '{config_path}'\n"
            "Run `sonar-feedback init` to generate a template."
        )

    try:
        with path.open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{path}' must be a YAML mapping at the top level.")
    return raw


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
server:
  url: "https://sonarcloud.io"
  token: "squ_xxxxxxxxxxxx"       # Prefer the SONAR_TOKEN environment variable

project:
  key: "my-org_my-project"
  organization: "my-org"

coverage:
  page_size: 500                  # files fetched for the per-file coverage ranking
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template sonar-feedback.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists (to avoid overwriting secrets).
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
