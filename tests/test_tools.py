from __future__ import annotations

import json

import pytest

from ArrangementMCP_Server.config import Settings
from ArrangementMCP_Server.engine.errors import HostCommandError, LimitExceededError, NotFoundError
from ArrangementMCP_Server.engine.errors import ValidationError
from ArrangementMCP_Server.tools import transform
from ArrangementMCP_Server.tools._base import _tool_handler

from tests.conftest import make_host
from tests.fake_live import FakeNote, FakeSong


class StubMCP:
    def __init__(self) -> None:
        self.tools = {}

    def tool(self):
        def decorator(func):
            self.tools[func.__name__] = func
            return func
        return decorator


@pytest.fixture
def tools(monkeypatch):
    song = FakeSong()
    track = song.add_track("Keys")
    track.add_clip(0.0, 8.0, notes=[FakeNote(1, 60, 0.0, 1.0, velocity=100)], content="keys")
    track.add_clip(8.0, 4.0, content="tail")
    host, transport = make_host(song)
    monkeypatch.setattr(transform, "get_live_host", lambda: host)
    monkeypatch.setattr(transform, "get_settings", lambda: Settings(holding_area_start=1000.0))
    mcp = StubMCP()
    transform.register_tools(mcp)
    return mcp.tools, track


@pytest.mark.parametrize("error, expected", [
    (ValidationError("bad slice"), "Invalid input: bad slice"),
    (NotFoundError("Track index out of range"), "Not found: Track index out of range"),
    (LimitExceededError("too many", count=70, limit=64), "Limit exceeded: too many"),
    (ConnectionError("refused"), "Ableton not available: refused"),
    (HostCommandError("delete_clip", "boom"), "Error testing: delete_clip: boom"),
])
def test_tool_handler_maps_errors(error: Exception, expected: str) -> None:
    @_tool_handler("testing")
    def failing():
        raise error

    assert failing() == expected


def test_tool_handler_passes_results_through() -> None:
    @_tool_handler("testing")
    def working(value):
        return f"ok {value}"

    assert working(3) == "ok 3"
    assert working.__name__ == "working"


def test_get_arrangement_clips_tool(tools) -> None:
    registered, _ = tools
    payload = json.loads(registered["get_arrangement_clips"](None, track_index=0))
    assert payload["track_name"] == "Keys"
    assert payload["time_signature"] == "4/4"
    assert [(c["position"], c["length"]) for c in payload["clips"]] == [("1|1", "2:0"), ("3|1", "1:0")]


def test_get_arrangement_clips_rejects_negative_index(tools) -> None:
    registered, _ = tools
    result = registered["get_arrangement_clips"](None, track_index=-1)
    assert result.startswith("Invalid input: track_index must be a non-negative integer")


def test_transform_tool_returns_json(tools) -> None:
    registered, track = tools
    clip_id = json.loads(registered["get_arrangement_clips"](None, track_index=0))["clips"][0]["clip_id"]

    payload = json.loads(registered["transform_clips"](None, clip_ids=clip_id, slice="1:0", seed=8))

    assert payload["seed"] == 8
    assert len(payload["clipIds"]) == 2
    assert [c.start_time for c in track.arrangement_clips] == [0.0, 4.0, 8.0]


def test_transform_tool_reports_validation_errors(tools) -> None:
    registered, _ = tools
    assert registered["transform_clips"](None, slice="1:0").startswith(
        "Invalid input: clipIds or arrangementTrackIndex is required"
    )
    assert registered["transform_clips"](None, arrangement_track_index=9).startswith("Not found:")
