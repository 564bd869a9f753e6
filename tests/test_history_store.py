import json

import pytest

import config
from history_store import MatchHistoryStore


def test_empty_state_for_new_match(store):
    assert store.match_id == "1001"
    assert store.stats_history == {}
    assert store.highlights == {"over_under": [], "home_odds": []}


def test_last_write_wins_per_minute(store, make_snapshot):
    store.record_snapshot(12, make_snapshot(attacks=[1, 1]))
    store.record_snapshot(12, make_snapshot(attacks=[3, 2]))
    assert list(store.stats_history) == [12]
    assert store.stats_history[12]["attacks"] == [3, 2]


def test_round_trip(store, db_file, make_snapshot):
    store.record_snapshot(10, make_snapshot(on_target=[1, 0]))
    store.record_snapshot(11, make_snapshot(on_target=[2, 1], corners=[1, 0]))
    store.add_highlight({"minute": 11, "level": "weak", "label": "47%"})

    reloaded = MatchHistoryStore(db_file=db_file)
    reloaded.open_match("1001")
    assert reloaded.stats_history == store.stats_history
    assert reloaded.highlights == store.highlights
    assert all(isinstance(minute, int) for minute in reloaded.stats_history)


def test_highlight_idempotent_by_minute(store):
    assert store.add_highlight({"minute": 20, "level": "weak", "label": "50%"})
    assert not store.add_highlight({"minute": 20, "level": "strong", "label": "90%"})
    assert store.highlights["over_under"] == [{"minute": 20, "level": "weak", "label": "50%"}]
    assert store.highlights["home_odds"] == store.highlights["over_under"]


def test_sorted_highlights(store):
    store.add_highlight({"minute": 30, "level": "weak", "label": "46%"})
    store.add_highlight({"minute": 25, "level": "medium", "label": "63%"})
    assert [h["minute"] for h in store.sorted_highlights("home_odds")] == [25, 30]


def test_switching_match_resets_and_restores(store, make_snapshot):
    store.record_snapshot(15, make_snapshot(corners=[2, 0]))
    store.open_match("2002")
    assert store.stats_history == {}
    store.open_match(1001)
    assert list(store.stats_history) == [15]


def test_counter_regression_resets_history(store, make_snapshot, monkeypatch, caplog):
    monkeypatch.setattr(config, "RESET_ON_COUNTER_REGRESSION", True)
    store.record_snapshot(10, make_snapshot(on_target=[2, 0]))
    store.record_snapshot(11, make_snapshot(on_target=[1, 0]))
    assert list(store.stats_history) == [11]
    assert "regression" in caplog.text


def test_counter_regression_kept_when_reset_disabled(store, make_snapshot, monkeypatch):
    monkeypatch.setattr(config, "RESET_ON_COUNTER_REGRESSION", False)
    store.record_snapshot(10, make_snapshot(on_target=[2, 0]))
    store.record_snapshot(11, make_snapshot(on_target=[1, 0]))
    assert sorted(store.stats_history) == [10, 11]


def test_clock_restart_with_lower_counters_resets_history(store, make_snapshot, monkeypatch, caplog):
    monkeypatch.setattr(config, "RESET_ON_COUNTER_REGRESSION", True)
    store.record_snapshot(60, make_snapshot(on_target=[5, 4]))
    store.record_snapshot(61, make_snapshot(on_target=[5, 5]))
    store.record_snapshot(3, make_snapshot(on_target=[0, 0]))
    assert list(store.stats_history) == [3]
    assert "regression" in caplog.text


def test_late_write_consistent_with_later_minute_is_kept(store, make_snapshot):
    store.record_snapshot(10, make_snapshot(on_target=[1, 0]))
    store.record_snapshot(12, make_snapshot(on_target=[3, 1]))
    store.record_snapshot(11, make_snapshot(on_target=[2, 1]))
    assert sorted(store.stats_history) == [10, 11, 12]


def test_corrupted_file_falls_back_to_empty(db_file):
    with open(db_file, "w", encoding="utf-8") as f:
        f.write("{not json")
    s = MatchHistoryStore(db_file=db_file)
    s.open_match("1001")
    assert s.stats_history == {}


def test_undecodable_file_falls_back_to_empty(db_file):
    with open(db_file, "wb") as f:
        f.write(b'{"1001": "\xff\xfe"}')
    s = MatchHistoryStore(db_file=db_file)
    assert s.matches == {}
    s.open_match("1001")
    assert s.stats_history == {}


def test_corrupted_entry_falls_back_to_empty(db_file):
    with open(db_file, "w", encoding="utf-8") as f:
        json.dump({
            "1001": "garbage",
            "1002": {
                "stats_history": {"x": {}, "7": {"on_target": ["1", "2"]}},
                "highlights": {"over_under": [{"minute": "bad"}, {"minute": 9, "level": "weak", "label": "45%"}]},
            },
        }, f)
    s = MatchHistoryStore(db_file=db_file)
    s.open_match("1001")
    assert s.stats_history == {}
    s.open_match("1002")
    assert list(s.stats_history) == [7]
    assert s.stats_history[7]["on_target"] == [1, 2]
    assert s.highlights["over_under"] == [{"minute": 9, "level": "weak", "label": "45%"}]
    assert s.highlights["home_odds"] == []


def test_record_requires_open_match(db_file, make_snapshot):
    s = MatchHistoryStore(db_file=db_file)
    with pytest.raises(RuntimeError):
        s.record_snapshot(1, make_snapshot())


def test_cleanup_old_matches(store, db_file, make_snapshot):
    store.record_snapshot(5, make_snapshot())
    store.matches["old"] = {"updated_at": "2000-01-01T00:00:00"}
    store.matches["broken"] = {}
    assert store.cleanup_old_matches() == 2
    assert set(store.matches) == {"1001"}
    assert store.get_statistics()["snapshots"] == 1
