"""Conversions between normalized volume and each device's native scale.

A normalized volume is a float in [0.0, 1.0]. It is the only value passed
between the mixer side and the receiver side; each side converts to and
from its own integer range.

Rounding is half away from zero throughout.
"""

from __future__ import annotations

import math

REMOTE_MAX = 180


def _round(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def to_remote_scale(volume: float) -> int:
    """Normalized volume -> receiver volume 0-180."""
    return max(0, min(REMOTE_MAX, _round(volume * REMOTE_MAX)))


def from_remote_scale(volume: int) -> float:
    """Receiver volume -> normalized volume.

    Out-of-range reports (the payload is a full byte) clamp to 1.0.
    """
    return _clamp(volume / REMOTE_MAX)


def to_local_scale(volume: float, min_volume: int, max_volume: int) -> int:
    """Normalized volume -> raw mixer value in ``[min_volume, max_volume]``."""
    return _round(min_volume + volume * (max_volume - min_volume))


def from_local_scale(volume: int, min_volume: int, max_volume: int) -> float:
    """Raw mixer value -> normalized volume.

    A mixer with an empty range reports 0.0.
    """
    if max_volume <= min_volume:
        return 0.0
    return (volume - min_volume) / (max_volume - min_volume)
