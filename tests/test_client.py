"""Tests for sonar_feedback/client.py"""

import pytest
import requests

from sonar_feedback.client import (
    ApiError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    SonarClient,
)

BASE = "https://sonar.example.com"


@pytest.fixture
def client() -> SonarClient:
    return SonarClient(url=BASE, token="tok")


# ---------------------------------------------------------------------------
# get() — happy path
# ---------------------------------------------------------------------------

def test_get_returns_parsed_json(client, requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", json={"issues": [], "total": 0})
    data = client.get("/api/issues/search")
    assert data == {"issues": [], "total": 0}


def test_get_sends_bearer_header_by_default(client, requests_mock):
    adapter = requests_mock.get(f"{BASE}/api/measures/component", json={})
    client.get("/api/measures/component")
    assert adapter.last_request.headers["Authorization"] == "Bearer tok"


def test_get_sends_basic_header_when_asked(client, requests_mock):
    adapter = requests_mock.get(f"{BASE}/api/issues/search", json={})
    client.get("/api/issues/search", auth="basic")
    # base64("tok:")
    assert adapter.last_request.headers["Authorization"] == "Basic dG9rOg=="


def test_get_passes_query_params(client, requests_mock):
    adapter = requests_mock.get(f"{BASE}/api/measures/component", json={})
    client.get("/api/measures/component", {"component": "proj", "pullRequest": "7"})
    assert adapter.last_request.qs["component"] == ["proj"]
    assert adapter.last_request.qs["pullrequest"] == ["7"]


def test_trailing_slash_in_base_url_is_ignored(requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", json={"ok": True})
    assert SonarClient(f"{BASE}/", "tok").get("/api/issues/search") == {"ok": True}


def test_unknown_auth_scheme_rejected(client):
    with pytest.raises(ValueError):
        client.get("/api/issues/search", auth="digest")


# ---------------------------------------------------------------------------
# get() — HTTP error codes
# ---------------------------------------------------------------------------

def test_get_401_raises_authentication_error(client, requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", status_code=401)
    with pytest.raises(AuthenticationError) as info:
        client.get("/api/issues/search", label="Issues")
    assert info.value.status_code == 401


def test_get_404_carries_label_status_and_parsed_body(client, requests_mock):
    body = {"errors": [{"msg": "not found"}]}
    requests_mock.get(f"{BASE}/api/qualitygates/project_status", status_code=404, json=body)
    with pytest.raises(NotFoundError) as info:
        client.get("/api/qualitygates/project_status", label="Quality Gate")
    assert str(info.value) == "Quality Gate API returned 404"
    assert info.value.status_code == 404
    assert info.value.details == body


def test_get_500_keeps_raw_text_details(client, requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", status_code=500, text="Internal Server Error")
    with pytest.raises(ApiError, match="500") as info:
        client.get("/api/issues/search", label="Issues")
    assert info.value.details == "Internal Server Error"


def test_error_without_body_has_no_details(client, requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", status_code=503)
    with pytest.raises(ApiError) as info:
        client.get("/api/issues/search")
    assert info.value.details is None


def test_non_json_success_body_raises_api_error(client, requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", text="<html>gateway</html>")
    with pytest.raises(ApiError, match="Issues API returned invalid JSON") as info:
        client.get("/api/issues/search", label="Issues")
    assert info.value.status_code == 200
    assert info.value.details == "<html>gateway</html>"


# ---------------------------------------------------------------------------
# get() — network errors
# ---------------------------------------------------------------------------

def test_get_timeout_raises_network_error(client, requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", exc=requests.exceptions.Timeout)
    with pytest.raises(NetworkError, match="timed out") as info:
        client.get("/api/issues/search")
    assert info.value.status_code is None


def test_get_connection_error_raises_network_error(client, requests_mock):
    requests_mock.get(f"{BASE}/api/issues/search", exc=requests.exceptions.ConnectionError)
    with pytest.raises(NetworkError, match="Unable to reach"):
        client.get("/api/issues/search")


def test_network_error_is_an_api_error():
    assert issubclass(NetworkError, ApiError)
