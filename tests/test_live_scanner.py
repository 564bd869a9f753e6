import pytest

from history_store import MatchHistoryStore
from live_scanner import MatchPoller
from pipeline import MatchPipeline


class FakeClient:
    def __init__(self, matches, on_fetch=None):
        self.matches = list(matches)
        self.on_fetch = on_fetch

    def get_match_details(self, event_id):
        if self.on_fetch:
            self.on_fetch()
        return self.matches.pop(0) if self.matches else None

    def get_match_odds(self, event_id):
        return None


def snapshot(minute, match_id="77"):
    return {"id": match_id, "ss": "1-0", "timer": {"tm": minute}, "stats": {"on_target": ["1", "0"]}}


@pytest.fixture
def pipeline(db_file):
    return MatchPipeline(store=MatchHistoryStore(db_file=db_file))


def test_poll_once_runs_pipeline(pipeline):
    poller = MatchPoller(FakeClient([snapshot(12)]), pipeline)
    poller.switch_match("77")
    result = poller.poll_once()
    assert result["minute"] == 12
    assert poller.last_result is result
    assert list(pipeline.store.stats_history) == [12]


def test_no_update_this_tick(pipeline):
    poller = MatchPoller(FakeClient([]), pipeline)
    poller.switch_match("77")
    assert poller.poll_once() is None


def test_foreign_event_ignored(pipeline):
    poller = MatchPoller(FakeClient([snapshot(12, match_id="99")]), pipeline)
    poller.switch_match("77")
    assert poller.poll_once() is None
    assert pipeline.store.stats_history == {}


def test_no_match_selected(pipeline):
    assert MatchPoller(FakeClient([snapshot(12)]), pipeline).poll_once() is None


def test_stop_cancels_run(pipeline):
    poller = MatchPoller(FakeClient([snapshot(12)]), pipeline, interval=3600)
    poller.client.on_fetch = poller.stop
    poller.switch_match("77")
    poller.run()
    assert poller.tick_count == 1
    assert not poller.running


def test_tick_errors_do_not_stop_loop(pipeline, caplog):
    poller = MatchPoller(FakeClient([]), pipeline, interval=3600)

    def boom():
        poller.stop()
        raise RuntimeError("feed exploded")

    poller.client.on_fetch = boom
    poller.switch_match("77")
    poller.run()
    assert "feed exploded" in caplog.text


def test_interval_floor(pipeline):
    assert MatchPoller(FakeClient([]), pipeline, interval=1).interval == 20
