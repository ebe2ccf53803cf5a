from __future__ import annotations

import json

import pytest

from ArrangementMCP_Server.connections.ableton import AbletonConnection
from ArrangementMCP_Server.engine.errors import HostCommandError, NotFoundError


class ScriptedSocket:
    """Socket stand-in that answers each sendall with the next scripted reply."""

    def __init__(self, replies) -> None:
        self.replies = list(replies)
        self.sent = []
        self.pending = b""
        self.closed = False

    def settimeout(self, timeout) -> None:
        pass

    def sendall(self, data: bytes) -> None:
        self.sent.append(json.loads(data.decode("utf-8")))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        self.pending += (json.dumps(reply) + "\n").encode("utf-8")

    def recv(self, size: int) -> bytes:
        chunk, self.pending = self.pending[:size], self.pending[size:]
        return chunk

    def close(self) -> None:
        self.closed = True


def _connection(sock) -> AbletonConnection:
    return AbletonConnection(host="localhost", port=9877, settle_delay=0.0, sock=sock)


def test_success_returns_result() -> None:
    sock = ScriptedSocket([{"status": "success", "result": {"tempo": 120.0}}])
    assert _connection(sock).send_command("get_song_info") == {"tempo": 120.0}
    assert sock.sent == [{"type": "get_song_info", "params": {}}]


def test_error_types_map_to_engine_errors() -> None:
    sock = ScriptedSocket([
        {"status": "error", "message": "Clip 4 not found", "error_type": "not_found"},
        {"status": "error", "message": "Cannot set start_marker", "error_type": "invalid"},
    ])
    connection = _connection(sock)
    with pytest.raises(NotFoundError):
        connection.send_command("get_clip_info", {"clip_id": "4"})
    with pytest.raises(HostCommandError, match="set_clip_property: Cannot set start_marker"):
        connection.send_command("set_clip_property", {"clip_id": "4"})


def test_modifying_command_is_not_retried(monkeypatch) -> None:
    sock = ScriptedSocket([OSError("broken pipe")])
    connection = _connection(sock)
    monkeypatch.setattr(connection, "connect", lambda: False)
    with pytest.raises(ConnectionError):
        connection.send_command("delete_clip", {"clip_id": "1"})
    assert len(sock.sent) == 1
    assert sock.closed


def test_read_only_command_is_retried_on_a_new_socket(monkeypatch) -> None:
    first = ScriptedSocket([OSError("reset")])
    second = ScriptedSocket([{"status": "success", "result": {"clips": []}}])
    connection = _connection(first)
    monkeypatch.setattr("ArrangementMCP_Server.connections.ableton.time.sleep", lambda s: None)

    def reconnect():
        connection.sock = second
        return True

    monkeypatch.setattr(connection, "connect", reconnect)
    assert connection.send_command("get_arrangement_clips", {"track_index": 0}) == {"clips": []}
    assert len(first.sent) == 1
    assert len(second.sent) == 1
