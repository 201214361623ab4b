"""Response parsing for receiver messages."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..errors import MalformedFrame
from .commands import OpCode
from .framing import Frame, parse_frames


@dataclass
class VolumeResponse:
    """Parsed Volume (0x04) frame."""

    volume: int


def last_volume_frame(frames: Iterable[Frame]) -> Frame | None:
    """Return the last Volume frame in ``frames``.

    When a read holds several volume reports only the newest one matters.
    """
    volume = None
    for frame in frames:
        if OpCode(frame.command) == OpCode.VOLUME:
            volume = frame
    return volume


def parse_volume(frame: Frame) -> VolumeResponse | None:
    """Parse a Volume frame."""
    if OpCode(frame.command) != OpCode.VOLUME:
        return None
    return VolumeResponse(volume=frame.payload)


def extract_volume(data: bytes) -> int:
    """Decode a raw read and return the receiver volume it reports.

    Raises:
        MalformedFrame: If no Volume frame could be decoded from ``data``.
    """
    frames = parse_frames(data)
    frame = last_volume_frame(frames)
    if frame is None:
        raise MalformedFrame(
            f"No volume frame in {len(frames)} decoded frame(s): {bytes(data).hex(' ')}"
        )
    return parse_volume(frame).volume
