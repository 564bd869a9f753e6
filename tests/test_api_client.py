import pytest
import requests

import api_client
from api_client import B365Client, is_excluded_league


class DummyResponse:
    def __init__(self, data=None, status_code=200, text=None):
        self._data = data
        self.status_code = status_code
        self.text = text if text is not None else ("{}" if data is not None else "")

    def json(self):
        if self._data is None:
            raise ValueError("no json")
        return self._data


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(api_client.time, "sleep", lambda seconds: None)


@pytest.fixture
def calls(monkeypatch):
    recorded = []
    responses = []

    def fake_get(self, url, params=None, timeout=None):
        recorded.append((url, params))
        return responses.pop(0)

    monkeypatch.setattr(requests.Session, "get", fake_get)
    return recorded, responses


INPLAY = {
    "success": 1,
    "results": [
        {"id": "1", "league": {"name": "Serie A"}},
        {"id": "2", "league": {"name": "Esoccer Battle - 8 mins"}},
        {"id": "3", "league": {}},
    ],
}


def test_inplay_filters_esoccer(calls):
    recorded, responses = calls
    responses.append(DummyResponse(INPLAY))
    events = B365Client(token="T").get_inplay_events()
    assert [e["id"] for e in events] == ["1"]
    url, params = recorded[0]
    assert params["token"] == "T"
    assert params["sport_id"] == 1


def test_match_details_picks_event(calls):
    _, responses = calls
    responses.append(DummyResponse(INPLAY))
    assert B365Client(token="T").get_match_details(1)["id"] == "1"


def test_rate_limit_retried(calls):
    recorded, responses = calls
    responses.extend([DummyResponse(status_code=429, text="slow down"), DummyResponse({"success": 1, "results": {}})])
    assert B365Client(token="T").get_match_odds("1") == {"success": 1, "results": {}}
    assert len(recorded) == 2


def test_timeouts_exhaust_retries(monkeypatch):
    attempts = []

    def fake_get(self, url, params=None, timeout=None):
        attempts.append(url)
        raise requests.Timeout()

    monkeypatch.setattr(requests.Session, "get", fake_get)
    assert B365Client(token="T").get_match_odds("1") is None
    assert len(attempts) == api_client.config.MAX_RETRIES


@pytest.mark.parametrize(
    "response",
    [
        DummyResponse({"success": 0, "error": "TOKEN_INVALID"}),
        DummyResponse(status_code=500, text="boom"),
        DummyResponse(status_code=403, text="denied"),
        DummyResponse(None, text="   "),
        DummyResponse(None, text="<html>"),
    ]
)
def test_failures_mean_no_update(calls, response):
    _, responses = calls
    responses.append(response)
    assert B365Client(token="T").get_match_odds("1") is None


def test_no_token_skips_request(calls):
    recorded, _ = calls
    assert B365Client(token="").get_inplay_events() == []
    assert recorded == []


def test_proxy_receives_target(calls):
    recorded, responses = calls
    responses.append(DummyResponse({"success": 1}))
    B365Client(token="T", proxy_url="https://relay.example/").get_match_odds("42")
    url, params = recorded[0]
    assert url == "https://relay.example/"
    assert params["target"].startswith(api_client.config.B365_ODDS_URL)
    assert "event_id=42" in params["target"]


def test_demo_mode_uses_no_network(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("network used in demo mode")

    monkeypatch.setattr(requests.Session, "get", fail)
    client = B365Client(token="DEMO_MODE")
    assert [e["id"] for e in client.get_inplay_events()] == ["1", "2"]
    assert client.get_match_details("2")["ss"] == "2-0"
    assert "1_3" in client.get_match_odds("1")["results"]["odds"]


def test_is_excluded_league():
    assert is_excluded_league({"league": {"name": "eSoccer GT League"}})
    assert not is_excluded_league({"league": {"name": "Bundesliga"}})
