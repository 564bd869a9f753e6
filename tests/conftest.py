import pytest

from history_store import MatchHistoryStore
from stats_parser import STAT_KEYS


@pytest.fixture
def make_snapshot():
    def _make(**pairs):
        snapshot = {key: [0, 0] for key in STAT_KEYS}
        for key, pair in pairs.items():
            snapshot[key] = list(pair)
        return snapshot
    return _make


@pytest.fixture
def db_file(tmp_path):
    return str(tmp_path / "history.json")


@pytest.fixture
def store(db_file):
    s = MatchHistoryStore(db_file=db_file)
    s.open_match("1001")
    return s
