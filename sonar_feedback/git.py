"""Local git and GitHub discovery, used when no PR number or branch is given.

Usage:
    branch = current_branch()                        # None outside a git checkout
    owner, repo = parse_github_remote(remote_url())
    pr_id = detect_pull_request(branch, owner, repo, github_token())
"""

import os
import re
import subprocess

import requests

from sonar_feedback.client import ApiError, NetworkError, parse_json, raise_for_response

GITHUB_API = "https://api.github.com"

_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/]([^/]+)/(.+?)(?:\.git)?/?$")


class GitError(Exception):
    """Raised when the local git / GitHub context cannot be determined."""


def _git(*args: str) -> str:
    try:
        result = subprocess.run(
            ["git", *args], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise GitError(f"`git {' '.join(args)}` failed") from exc
    return result.stdout.strip()


def current_branch() -> str | None:
    """Return the checked-out branch name, or None when it cannot be read."""
    try:
        branch = _git("rev-parse", "--abbrev-ref", "HEAD")
    except GitError:
        return None
    return branch or None


def current_branch_or_raise() -> str:
    branch = current_branch()
    if not branch:
        raise GitError(
            "Could not determine the current git branch. Pass one explicitly with --branch."
        )
    return branch


def remote_url(remote: str = "origin") -> str:
    return _git("remote", "get-url", remote)


def parse_github_remote(url: str) -> tuple[str, str]:
    """Return ``(owner, repo)`` from an https or ssh GitHub remote URL."""
    match = _GITHUB_REMOTE_RE.search(url.strip())
    if not match:
        raise GitError(f"Could not parse GitHub repository information from remote URL '{url}'")
    return match.group(1), match.group(2)


def github_token() -> tuple[str | None, str | None]:
    """Return ``(token, source)``: GITHUB_TOKEN first, then ``gh auth token``."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token, "GITHUB_TOKEN environment variable"

    try:
        result = subprocess.run(
            ["gh", "auth", "token"], capture_output=True, text=True, check=True
        )
    except (OSError, subprocess.CalledProcessError):
        return None, None
    token = result.stdout.strip()
    return (token, "gh auth") if token else (None, None)


def detect_pull_request(
    branch: str, owner: str, repo: str, token: str | None, timeout: int = 30
) -> str:
    """Return the number of the first open pull request whose head is *branch*.

    Raises:
        GitError: no token available, or no open PR for the branch
        ApiError: the GitHub API answered with a non-2xx status
    """
    if not token:
        raise GitError(
            "GitHub token is required for auto-detection. "
            "Set GITHUB_TOKEN or authenticate with `gh auth login`."
        )

    url = f"{GITHUB_API}/repos/{owner}/{repo}/pulls"
    params = {"state": "open", "head": f"{owner}:{branch}"}
    headers = {
        "Authorization": f"token {token}",
        "Accept": "application/vnd.github.v3+json",
    }
    try:
        response = requests.get(url, params=params, headers=headers, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise NetworkError(f"Unable to reach GitHub API at '{GITHUB_API}'") from exc

    raise_for_response(response, "GitHub")
    pulls = parse_json(response, "GitHub")
    if not pulls:
        raise GitError(f'No open pull request found for branch "{branch}"')
    try:
        return str(pulls[0]["number"])
    except (KeyError, IndexError, TypeError) as exc:
        raise ApiError(
            "GitHub API returned an unexpected pull request listing", response.status_code, pulls
        ) from exc
