"""Opcode constants and the commands this client sends to the receiver."""

from __future__ import annotations

from enum import IntEnum

from .framing import build_frame

MAX_VOLUME = 180
POLL_VOLUME_PAYLOAD = 0x04


class OpCode(IntEnum):
    """Frame opcodes.

    Bytes without a member of their own look up as ``UNKNOWN`` so that
    unrelated frames still decode.
    """

    POLL = 0x02
    SOURCE = 0x03
    VOLUME = 0x04
    POWER = 0x09
    MUTE = 0x0A
    UNKNOWN = -1

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN


def build_command(command: OpCode, payload: int) -> bytes:
    """Build a single frame for a command."""
    return build_frame(command.value, payload)


def build_set_volume(volume: int) -> bytes:
    """Build a Volume command.

    Args:
        volume: Receiver volume level 0-180.
    """
    if not 0 <= volume <= MAX_VOLUME:
        raise ValueError(f"Volume must be 0-{MAX_VOLUME}, got {volume}")
    return build_command(OpCode.VOLUME, volume)


def build_poll_volume() -> bytes:
    """Build a Poll command asking the receiver to report its volume."""
    return build_command(OpCode.POLL, POLL_VOLUME_PAYLOAD)
