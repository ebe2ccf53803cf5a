"""Host capability interface.

The engine never touches Live objects. It works with string clip ids and
plain snapshots (:class:`ClipInfo`, :class:`NoteInfo`) that are re-read
after every mutating call, because Live invalidates object handles when
the arrangement changes.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ArrangementMCP_Server.engine.errors import HostCommandError, NotFoundError

logger = logging.getLogger("ArrangementMCP.host")

MIDI = "midi"
AUDIO = "audio"


@dataclass(frozen=True)
class ClipInfo:
    clip_id: str
    track_index: int
    kind: str
    start_time: float
    end_time: float
    looping: bool
    loop_start: float
    loop_end: float
    start_marker: float
    end_marker: float
    is_arrangement_clip: bool = True
    warping: Optional[bool] = None
    gain: Optional[float] = None
    pitch_coarse: Optional[int] = None
    pitch_fine: Optional[float] = None
    name: str = ""

    @property
    def length(self) -> float:
        return self.end_time - self.start_time

    @property
    def is_midi(self) -> bool:
        return self.kind == MIDI

    @property
    def is_audio(self) -> bool:
        return self.kind == AUDIO

    @property
    def is_unwarped_audio(self) -> bool:
        return self.kind == AUDIO and self.warping is False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClipInfo":
        return cls(
            clip_id=str(data["clip_id"]),
            track_index=int(data["track_index"]),
            kind=data["kind"],
            start_time=float(data["start_time"]),
            end_time=float(data["end_time"]),
            looping=bool(data["looping"]),
            loop_start=float(data["loop_start"]),
            loop_end=float(data["loop_end"]),
            start_marker=float(data["start_marker"]),
            end_marker=float(data["end_marker"]),
            is_arrangement_clip=bool(data.get("is_arrangement_clip", True)),
            warping=data.get("warping"),
            gain=data.get("gain"),
            pitch_coarse=data.get("pitch_coarse"),
            pitch_fine=data.get("pitch_fine"),
            name=data.get("name", ""),
        )


@dataclass
class NoteInfo:
    note_id: int
    pitch: int
    start_time: float
    duration: float
    velocity: float
    velocity_deviation: float = 0.0
    probability: float = 1.0
    mute: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NoteInfo":
        return cls(
            note_id=int(data["note_id"]),
            pitch=int(data["pitch"]),
            start_time=float(data["start_time"]),
            duration=float(data["duration"]),
            velocity=float(data["velocity"]),
            velocity_deviation=float(data.get("velocity_deviation", 0.0)),
            probability=float(data.get("probability", 1.0)),
            mute=bool(data.get("mute", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TrackInfo:
    track_index: int
    name: str
    kind: str
    clip_ids: Tuple[str, ...] = field(default_factory=tuple)


class Host:
    """What the engine needs from a DAW. Subclasses implement every method."""

    def get_time_signature(self) -> Tuple[int, int]:
        raise NotImplementedError

    def resolve_track(self, track_index: int) -> TrackInfo:
        raise NotImplementedError

    def list_arrangement_clips(self, track_index: int) -> List[ClipInfo]:
        raise NotImplementedError

    def get_clip(self, clip_id: str) -> ClipInfo:
        raise NotImplementedError

    def set_clip_property(self, clip_id: str, name: str, value: Any) -> None:
        raise NotImplementedError

    def duplicate_clip_to_arrangement(self, clip_id: str, destination: float) -> str:
        raise NotImplementedError

    def create_blank_clip(self, track_index: int, kind: str, start: float, length: float) -> str:
        raise NotImplementedError

    def delete_clip(self, clip_id: str) -> None:
        raise NotImplementedError

    def get_notes(self, clip_id: str) -> List[NoteInfo]:
        raise NotImplementedError

    def apply_note_modifications(self, clip_id: str, notes: List[NoteInfo]) -> None:
        raise NotImplementedError


def raise_for_response(command_type: str, response: Dict[str, Any]) -> Dict[str, Any]:
    """Return the result of a Remote Script response or raise the matching error."""
    if response.get("status") == "error":
        message = response.get("message", "Unknown error from Ableton")
        if response.get("error_type") == "not_found":
            raise NotFoundError(message)
        raise HostCommandError(command_type, message)
    return response.get("result", {})


class CommandHost(Host):
    """Host implemented on top of the Remote Script command protocol.

    ``send(command_type, params)`` returns the command's ``result`` dict
    and raises on error responses (see :func:`raise_for_response`).
    """

    def __init__(self, send: Callable[[str, Dict[str, Any]], Dict[str, Any]]):
        self._send = send

    def get_time_signature(self) -> Tuple[int, int]:
        result = self._send("get_song_info", {})
        return int(result["signature_numerator"]), int(result["signature_denominator"])

    def resolve_track(self, track_index: int) -> TrackInfo:
        result = self._send("get_track_info", {"track_index": track_index})
        return TrackInfo(
            track_index=int(result["track_index"]),
            name=result.get("name", ""),
            kind=result["kind"],
            clip_ids=tuple(str(c) for c in result.get("arrangement_clip_ids", [])),
        )

    def list_arrangement_clips(self, track_index: int) -> List[ClipInfo]:
        result = self._send("get_arrangement_clips", {"track_index": track_index})
        return [ClipInfo.from_dict(c) for c in result.get("clips", [])]

    def get_clip(self, clip_id: str) -> ClipInfo:
        return ClipInfo.from_dict(self._send("get_clip_info", {"clip_id": clip_id}))

    def set_clip_property(self, clip_id: str, name: str, value: Any) -> None:
        self._send("set_clip_property", {"clip_id": clip_id, "name": name, "value": value})

    def duplicate_clip_to_arrangement(self, clip_id: str, destination: float) -> str:
        result = self._send(
            "duplicate_clip_to_arrangement", {"clip_id": clip_id, "time": destination}
        )
        return str(result["clip_id"])

    def create_blank_clip(self, track_index: int, kind: str, start: float, length: float) -> str:
        result = self._send("create_blank_clip", {
            "track_index": track_index, "kind": kind, "start": start, "length": length,
        })
        return str(result["clip_id"])

    def delete_clip(self, clip_id: str) -> None:
        self._send("delete_clip", {"clip_id": clip_id})

    def get_notes(self, clip_id: str) -> List[NoteInfo]:
        result = self._send("get_notes", {"clip_id": clip_id})
        return [NoteInfo.from_dict(n) for n in result.get("notes", [])]

    def apply_note_modifications(self, clip_id: str, notes: List[NoteInfo]) -> None:
        self._send("apply_note_modifications", {
            "clip_id": clip_id, "notes": [n.to_dict() for n in notes],
        })
