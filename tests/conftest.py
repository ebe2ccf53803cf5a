from __future__ import annotations

import json
from typing import Any, Dict, List, Tuple

import pytest

from ArrangementMCP_Remote_Script.dispatch import process_command
from ArrangementMCP_Remote_Script.handlers._helpers import ClipRegistry
from ArrangementMCP_Server.engine.host import CommandHost, raise_for_response

from tests.fake_live import FakeSong


class InProcessTransport:
    """Runs commands through the Remote Script dispatcher without a socket."""

    def __init__(self, song: FakeSong) -> None:
        self.song = song
        self.registry = ClipRegistry()
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def __call__(self, command_type: str, params: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((command_type, dict(params)))
        command = {"type": command_type, "params": params}
        # round-trip through JSON like the real wire does
        response = json.loads(json.dumps(process_command(self.song, self.registry, command)))
        return raise_for_response(command_type, response)

    def commands(self, command_type: str) -> List[Dict[str, Any]]:
        return [params for name, params in self.calls if name == command_type]


def make_host(song: FakeSong) -> Tuple[CommandHost, InProcessTransport]:
    transport = InProcessTransport(song)
    return CommandHost(transport), transport


@pytest.fixture
def song() -> FakeSong:
    return FakeSong()


@pytest.fixture
def transport(song: FakeSong) -> InProcessTransport:
    return InProcessTransport(song)


@pytest.fixture
def host(transport: InProcessTransport) -> CommandHost:
    return CommandHost(transport)
