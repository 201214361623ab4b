"""Frame builder and parser for the receiver's TCP control protocol.

Frame layout::

    +-------------------+---------+---------+
    |      Header       | Command | Payload |
    |     3 bytes       | 1 byte  | 1 byte  |
    +-------------------+---------+---------+

- Header: always 0x00 0x01 0x02
- Command: opcode byte (see :class:`~.commands.OpCode`)
- Payload: one byte whose meaning depends on the command

A single read from the socket may hold several frames back to back, or end
in the middle of one.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import MalformedFrame

HEADER = b"\x00\x01\x02"
FRAME_SIZE = 5  # 3(header) + 1(cmd) + 1(payload)


@dataclass
class Frame:
    """A parsed protocol frame."""

    command: int
    payload: int

    def __repr__(self) -> str:
        return f"Frame(command=0x{self.command:02X}, payload=0x{self.payload:02X})"


def build_frame(command: int, payload: int) -> bytes:
    """Build a 5-byte frame.

    Args:
        command: Opcode byte.
        payload: Payload byte.

    Raises:
        ValueError: If either value does not fit in a byte.
    """
    if not 0 <= command <= 255:
        raise ValueError(f"Command must be 0-255, got {command}")
    if not 0 <= payload <= 255:
        raise ValueError(f"Payload must be 0-255, got {payload}")
    return HEADER + bytes([command, payload])


def parse_frame(data: bytes) -> Frame:
    """Parse the frame at the start of ``data``.

    Bytes after the first frame are ignored.

    Raises:
        MalformedFrame: If fewer than 5 bytes are available or the header
            does not match.
    """
    if len(data) < FRAME_SIZE:
        raise MalformedFrame(
            f"Frame needs {FRAME_SIZE} bytes, got {len(data)}"
        )

    if data[:3] != HEADER:
        raise MalformedFrame(f"Bad frame header: {bytes(data[:3]).hex(' ')}")

    return Frame(command=data[3], payload=data[4])


def parse_frames(data: bytes) -> list[Frame]:
    """Parse as many consecutive frames as possible from ``data``.

    Decoding stops without error at the first offset where a complete frame
    cannot be read, so a trailing partial frame is simply dropped.
    """
    frames: list[Frame] = []
    offset = 0
    while offset < len(data):
        try:
            frames.append(parse_frame(data[offset : offset + FRAME_SIZE]))
        except MalformedFrame:
            break
        offset += FRAME_SIZE

    return frames
