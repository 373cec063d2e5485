from __future__ import annotations

from dataclasses import replace

import pytest

from transit_card.data.models import Departure, Disturbance, SourceState
from transit_card.logic.render_gate import MISSING, RenderGate, fingerprint


def _departure(line: str = "13A", direction: str = "X", countdown: int = 5, **kwargs) -> Departure:
    return Departure(line=line, direction=direction, countdown=countdown, **kwargs)


def _state(*departures: Departure, disturbances: tuple[Disturbance, ...] = (), stop_id: str = "60200001") -> SourceState:
    return SourceState(stop_id=stop_id, departures=tuple(departures), disturbances=disturbances)


def test_same_snapshot_twice_reports_change_then_no_change() -> None:
    gate = RenderGate()
    snapshot = {"stopA": _state(_departure())}

    assert gate.should_rerender(snapshot, ["stopA"], 3) is True
    assert gate.should_rerender(snapshot, ["stopA"], 3) is False


def test_missing_then_present_then_identical() -> None:
    gate = RenderGate()

    assert gate.should_rerender({}, ["stopA"], 3) is True
    assert gate.fingerprints == {"stopA": MISSING}

    snapshot = {"stopA": _state(_departure(line="13A", direction="X", countdown=5))}
    assert gate.should_rerender(snapshot, ["stopA"], 3) is True

    same = {"stopA": _state(_departure(line="13A", direction="X", countdown=5))}
    assert gate.should_rerender(same, ["stopA"], 3) is False


def test_present_to_missing_reports_change() -> None:
    gate = RenderGate()
    gate.should_rerender({"stopA": _state()}, ["stopA"], 3)

    assert gate.should_rerender({"stopA": None}, ["stopA"], 3) is True
    assert gate.fingerprints["stopA"] == MISSING


def test_changes_beyond_display_limit_are_ignored() -> None:
    gate = RenderGate()
    d1, d2, d3, d4 = (_departure(line=str(n), countdown=n) for n in range(1, 5))
    gate.should_rerender({"s": _state(d1, d2, d3, d4)}, ["s"], 3)

    later_only = _state(d1, d2, d3, replace(d4, countdown=40))
    assert gate.should_rerender({"s": later_only}, ["s"], 3) is False

    second_too = _state(d1, replace(d2, countdown=9), d3, replace(d4, countdown=40))
    assert gate.should_rerender({"s": second_too}, ["s"], 3) is True


def test_new_disturbance_reports_change() -> None:
    gate = RenderGate()
    gate.should_rerender({"s": _state(_departure())}, ["s"], 3)

    with_alert = _state(_departure(), disturbances=(Disturbance(key="X", priority="high"),))
    assert gate.should_rerender({"s": with_alert}, ["s"], 3) is True


def test_appending_departure_past_limit_keeps_fingerprint() -> None:
    base = _state(_departure(countdown=1), _departure(countdown=2))

    longer = _state(_departure(countdown=1), _departure(countdown=2), _departure(countdown=30))

    assert fingerprint(base, 2) == fingerprint(longer, 2)
    assert fingerprint(base, 3) != fingerprint(longer, 3)


def _first(state: SourceState, **changes) -> SourceState:
    return replace(state, departures=(replace(state.departures[0], **changes),) + state.departures[1:])


@pytest.mark.parametrize(
    "mutate",
    [
        lambda s: replace(s, stop_id="other"),
        lambda s: _first(s, line="14A"),
        lambda s: _first(s, direction="Y"),
        lambda s: _first(s, countdown=6),
        lambda s: _first(s, realtime="2025-01-01T10:05:00+01:00"),
        lambda s: _first(s, planned="2025-01-01T10:04:00+01:00"),
        lambda s: _first(s, disturbances=1),
        lambda s: replace(s, disturbances=(Disturbance(key="Y", priority="high"),)),
        lambda s: replace(s, disturbances=(Disturbance(key="X", priority="low"),)),
        lambda s: replace(s, active=False),
    ],
    ids=["stop", "line", "direction", "countdown", "realtime", "planned", "count", "title", "priority", "active"],
)
def test_every_projected_field_affects_fingerprint(mutate) -> None:
    base = _state(_departure(), _departure(countdown=9), disturbances=(Disturbance(key="X", priority="high"),))

    assert fingerprint(base, 3) != fingerprint(mutate(base), 3)


def test_unprojected_fields_do_not_affect_fingerprint() -> None:
    raw = {
        "stop_id": "60200001",
        "departures": [{"line": "13A", "direction": "X", "countdown": 5}],
        "traffic_info": [{"title": "X", "priority": "high"}],
    }
    noisy = {
        **raw,
        "friendly_name": "Stop A",
        "departures": [{"line": "13A", "direction": "X", "countdown": 5, "vehicle": "T-123"}],
        "traffic_info": [{"title": "X", "priority": "high", "description": "long text"}],
    }

    assert fingerprint(raw, 3) == fingerprint(noisy, 3)


def test_field_boundaries_cannot_collide() -> None:
    pipes = _state(_departure(line="A|B", direction=""), _departure(line="", direction=""))
    shifted = _state(_departure(line="A", direction="B|"), _departure(line="", direction=""))
    merged = _state(_departure(line="A", direction="B"))

    assert fingerprint(pipes, 3) != fingerprint(shifted, 3)
    assert fingerprint(shifted, 3) != fingerprint(merged, 3)


def test_missing_sentinel_differs_from_any_present_record() -> None:
    candidates = [
        SourceState(stop_id=""),
        SourceState(stop_id=MISSING),
        _state(_departure(line=MISSING, direction=MISSING)),
        {},
    ]
    for record in candidates:
        assert fingerprint(record, 3) != MISSING


def test_fingerprint_is_deterministic() -> None:
    state = _state(_departure(), _departure(countdown=7), disturbances=(Disturbance("a", "b"),))

    assert fingerprint(state, 3) == fingerprint(state, 3)
    assert fingerprint(state, 3) == fingerprint(replace(state), 3)


def test_reset_forces_change_and_drops_removed_sources() -> None:
    gate = RenderGate()
    snapshot = {"a": _state(stop_id="1"), "b": _state(stop_id="2")}
    gate.should_rerender(snapshot, ["a", "b"], 3)

    gate.reset()
    assert gate.fingerprints == {}

    assert gate.should_rerender(snapshot, ["a"], 3) is True
    assert set(gate.fingerprints) == {"a"}
    assert gate.should_rerender(snapshot, ["a"], 3) is False


def test_removed_source_without_reset_is_dropped_from_table() -> None:
    gate = RenderGate()
    snapshot = {"a": _state(stop_id="1"), "b": _state(stop_id="2")}
    gate.should_rerender(snapshot, ["a", "b"], 3)

    assert gate.should_rerender(snapshot, ["a"], 3) is False
    assert gate.fingerprints == {"a": fingerprint(snapshot["a"], 3)}


def test_unknown_sources_in_snapshot_are_ignored() -> None:
    gate = RenderGate()
    gate.should_rerender({"a": _state()}, ["a"], 3)

    assert gate.should_rerender({"a": _state(), "zzz": _state(stop_id="9")}, ["a"], 3) is False
    assert "zzz" not in gate.fingerprints


def test_empty_configuration_changes_once() -> None:
    gate = RenderGate()

    assert gate.should_rerender({}, [], 3) is True
    assert gate.should_rerender({"a": _state()}, [], 3) is False


def test_malformed_records_do_not_raise_or_block_others() -> None:
    gate = RenderGate()
    snapshot = {
        "bad": {"stop_id": None, "departures": [None, {"countdown": "soon"}, 42], "traffic_info": "oops"},
        "worse": "not a mapping",
        "good": _state(_departure()),
    }

    assert gate.should_rerender(snapshot, ["bad", "worse", "good"], 3) is True
    assert gate.fingerprints["good"] == fingerprint(snapshot["good"], 3)

    snapshot["good"] = _state(_departure(countdown=4))
    assert gate.should_rerender(snapshot, ["bad", "worse", "good"], 3) is True


def test_raw_mapping_and_record_fingerprint_alike() -> None:
    raw = {
        "stop_id": "60200001",
        "departures": [{"line": "13A", "direction": "X", "countdown": "5"}],
        "traffic_info": [{"id": "T1", "priority": "high"}],
    }
    record = _state(_departure(), disturbances=(Disturbance("T1", "high"),))

    assert fingerprint(raw, 3) == fingerprint(record, 3)


def test_sources_may_be_config_records() -> None:
    class Source:
        def __init__(self, source_id: str) -> None:
            self.id = source_id

    gate = RenderGate()
    gate.should_rerender({"a": _state()}, [Source("a")], 3)

    assert set(gate.fingerprints) == {"a"}


def test_sources_may_be_mappings() -> None:
    gate = RenderGate()
    snapshot = {"a": _state()}

    gate.should_rerender(snapshot, [{"id": "a", "name": "Stop A"}], 3)

    assert gate.fingerprints == {"a": fingerprint(snapshot["a"], 3)}
    assert gate.should_rerender(snapshot, ["a"], 3) is False


def test_display_limit_below_one_is_clamped() -> None:
    state = _state(_departure(countdown=1), _departure(countdown=2))

    assert fingerprint(state, 0) == fingerprint(state, 1)
