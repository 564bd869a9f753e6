from shot_events import derive_shot_events


def test_delta_produces_events(make_snapshot):
    history = {
        10: make_snapshot(on_target=[2, 0]),
        11: make_snapshot(on_target=[3, 2]),
    }
    events = derive_shot_events(history)
    assert events == [{"minute": 11, "type": "on"}] * 3


def test_regression_yields_no_events(make_snapshot, caplog):
    history = {
        10: make_snapshot(on_target=[2, 0]),
        11: make_snapshot(on_target=[5, 0]),
        12: make_snapshot(on_target=[3, 0]),
    }
    events = derive_shot_events(history)
    assert [e for e in events if e["minute"] == 12] == []
    assert len(events) == 3
    assert "regression" in caplog.text


def test_on_and_off_target(make_snapshot):
    history = {
        30: make_snapshot(),
        20: make_snapshot(off_target=[0, 1]),
        31: make_snapshot(on_target=[1, 0], off_target=[1, 1]),
    }
    # 20 -> 30: off-target drops by 1 (no events); 30 -> 31: +1 on, +2 off
    events = derive_shot_events(history)
    assert events == [
        {"minute": 31, "type": "on"},
        {"minute": 31, "type": "off"},
        {"minute": 31, "type": "off"},
    ]


def test_short_history():
    assert derive_shot_events({}) == []
