"""Messages carried on the command bus from the producers to the engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PollRequest:
    """Ask the receiver to report its current volume."""


@dataclass(frozen=True)
class RemoteVolumeChanged:
    """The receiver reported a new normalized volume."""

    volume: float


@dataclass(frozen=True)
class LocalVolumeChanged:
    """The local mixer reported a new normalized volume."""

    volume: float


Command = Union[PollRequest, RemoteVolumeChanged, LocalVolumeChanged]
