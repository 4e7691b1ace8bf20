"""Tests for sonar_feedback/reports/issues.py"""

import warnings

import pytest

from sonar_feedback.client import SonarClient
from sonar_feedback.config import Config
from sonar_feedback.models import Issue, Severity, Target
from sonar_feedback.reports.issues import get_issues, sort_by_severity

BASE    = "https://sonar.example.com"
PROJECT = "example-project"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _mock_issue(key="i1", severity="MAJOR", type_="CODE_SMELL") -> dict:
    return {
        "key": key, "rule": "python:S1234", "severity": severity,
        "type": type_, "component": f"{PROJECT}:src/foo.py",
        "line": 42, "message": "Some issue", "effort": "5min", "debt": "5min",
        "status": "OPEN", "tags": ["convention"],
        "creationDate": "2026-02-23T10:00:00+0000",
    }


def _page(items: list, **extra) -> dict:
    return {"total": len(items), "effortTotal": 0, "debtTotal": 0, "issues": items, **extra}


def _client():
    return SonarClient(BASE, "tok")


def _config():
    return Config(token="tok", project_key=PROJECT, organization="example-org", url=BASE)


def _issue(key: str, severity: str) -> Issue:
    return Issue(key=key, rule="r", severity=severity, component="c", file_path="c", message="m")


# ---------------------------------------------------------------------------
# get_issues
# ---------------------------------------------------------------------------

def test_pr_issues_api_params(requests_mock):
    adapter = requests_mock.get(f"{BASE}/api/issues/search", json=_page([]))
    get_issues(_client(), _config(), Target(pull_request="99"))

    qs = adapter.last_request.qs
    assert qs["componentkeys"] == [PROJECT]
    assert qs["pullrequest"]   == ["99"]
    assert qs["organization"]  == ["example-org"]
    assert qs["resolved"]      == ["false"]
    assert qs["ps"]            == ["500"]


def test_issue_search_uses_basic_auth(requests_mock):
    adapter = requests_mock.get(f"{BASE}/api/issues/search", json=_page([]))
    get_issues(_client(), _config(), Target(branch="main"))
    assert adapter.last_request.headers["Authorization"].startswith("Basic ")


def test_branch_issues_api_params(requests_mock):
    adapter = requests_mock.get(f"{BASE}/api/issues/search", json=_page([]))
    get_issues(_client(), _config(), Target(branch="main"))
    assert adapter.last_request.qs["branch"] == ["main"]


def test_issue_fields_and_file_path(requests_mock):
    raw = _mock_issue("i1")
    raw["unexpected_field"] = "should_be_dropped"
    requests_mock.get(f"{BASE}/api/issues/search", json=_page([raw]))

    issues, _ = get_issues(_client(), _config(), Target(pull_request="1"))
    issue = issues[0].to_dict()
    assert "unexpected_field" not in issue
    assert issue["filePath"]   == "src/foo.py"
    assert issue["component"]  == f"{PROJECT}:src/foo.py"
    assert issue["line"]       == 42
    assert issue["updateDate"] is None
    assert issue["tags"]       == ["convention"]


def test_missing_optional_fields_are_null(requests_mock):
    raw = {"key": "i1", "rule": "r", "severity": "MINOR", "component": f"{PROJECT}:a.py",
           "message": "m", "creationDate": "2026-01-01T00:00:00+0000"}
    requests_mock.get(f"{BASE}/api/issues/search", json=_page([raw]))

    issues, _ = get_issues(_client(), _config(), Target(pull_request="1"))
    issue = issues[0].to_dict()
    assert issue["line"] is None
    assert issue["type"] is None
    assert issue["effort"] is None
    assert issue["tags"] == []


def test_summary_totals_come_from_server(requests_mock):
    items = [_mock_issue("i1"), _mock_issue("i2", severity="CRITICAL", type_="BUG")]
    requests_mock.get(
        f"{BASE}/api/issues/search",
        json=_page(items, total=812, effortTotal=95, debtTotal=95),
    )
    issues, summary = get_issues(_client(), _config(), Target(pull_request="42"))

    assert len(issues)          == 2
    assert summary.total        == 812
    assert summary.effort_total == 95
    assert summary.debt_total   == 95


def test_summary_counts_by_severity(requests_mock):
    items = [_mock_issue("a", "MAJOR"), _mock_issue("b", "CRITICAL"), _mock_issue("c", "MAJOR")]
    requests_mock.get(f"{BASE}/api/issues/search", json=_page(items))
    _, summary = get_issues(_client(), _config(), Target(pull_request="42"))

    assert summary.by_severity == {
        "BLOCKER": 0, "CRITICAL": 1, "MAJOR": 2, "MINOR": 0, "INFO": 0,
    }


def test_unknown_severity_counted_as_info(requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", json=_page([_mock_issue("a", "SHINY")]))
    with pytest.warns(UserWarning, match="SHINY"):
        _, summary = get_issues(_client(), _config(), Target(pull_request="42"))
    assert summary.by_severity["INFO"] == 1


def test_empty_result(requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", json={"total": 0, "issues": []})
    issues, summary = get_issues(_client(), _config(), Target(pull_request="1"))
    assert issues == []
    assert summary.total == 0
    assert summary.effort_total == 0
    assert all(v == 0 for v in summary.by_severity.values())


# ---------------------------------------------------------------------------
# Severity.from_value / sort_by_severity
# ---------------------------------------------------------------------------

def test_parse_known_severities_case_insensitively():
    assert Severity.from_value("blocker") is Severity.BLOCKER
    assert Severity.from_value("INFO") is Severity.INFO


def test_parse_unknown_severity():
    with pytest.warns(UserWarning):
        assert Severity.from_value("HIGH") is Severity.UNKNOWN
    assert Severity.UNKNOWN.bucket is Severity.INFO


def test_sort_most_severe_first_and_stable():
    issues = [_issue("1", "MINOR"), _issue("2", "BLOCKER"), _issue("3", "MINOR"), _issue("4", "MAJOR")]
    assert [i.key for i in sort_by_severity(issues)] == ["2", "4", "1", "3"]


def test_sort_puts_unknown_last():
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        issues = [_issue("1", "WEIRD"), _issue("2", "INFO")]
    assert [i.key for i in sort_by_severity(issues)] == ["2", "1"]


def test_unknown_severity_warned_once_through_fetch_and_sort(requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", json=_page([_mock_issue(severity="SHINY")]))

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        issues, summary = get_issues(_client(), _config(), Target(branch="main"))
        sort_by_severity(issues)

    assert len(caught) == 1
    assert issues[0].level is Severity.UNKNOWN
    assert summary.by_severity["INFO"] == 1
    assert "level" not in issues[0].to_dict()
