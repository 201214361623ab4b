"""The sync engine: single consumer of the command bus.

The engine is the only owner of :class:`SyncState`. Producers never touch
it; they put immutable messages on the queue and the engine applies them
one at a time, in arrival order, so the debounce check and the state update
can never interleave with another change.

Loop prevention works with two timestamps. A volume written to the mixer
because the receiver changed will come back a moment later as a local
change event, and the reverse holds for the receiver. Each incoming change
is therefore checked against the time of the last write made on behalf of
the *other* side, plus a minimum change size that absorbs the rounding
difference between the 0-180 receiver scale and the mixer's range.
"""

from __future__ import annotations

import logging
import queue
import time
from dataclasses import dataclass
from typing import Callable

from ..config import DEBOUNCE_WINDOW, VOLUME_THRESHOLD, SyncSettings
from ..protocol.commands import build_poll_volume, build_set_volume
from ..utils.scaling import to_local_scale, to_remote_scale
from .messages import Command, LocalVolumeChanged, PollRequest, RemoteVolumeChanged

logger = logging.getLogger(__name__)


@dataclass
class SyncState:
    """Last synchronized volume and when each side last caused a write."""

    last_known_volume: float = 0.0
    last_local_write_at: float = 0.0
    last_remote_write_at: float = 0.0


def can_update(
    last_update: float,
    last_volume: float,
    volume: float,
    now: float | None = None,
    window: float = DEBOUNCE_WINDOW,
    threshold: float = VOLUME_THRESHOLD,
) -> bool:
    """Decide whether a volume change should be propagated.

    Args:
        last_update: Timestamp of the last write made for the opposite side.
        last_volume: Last synchronized normalized volume.
        volume: Newly reported normalized volume.
        now: Current timestamp, defaults to ``time.time()``.
        window: Seconds after ``last_update`` during which changes are
            treated as echoes.
        threshold: Minimum absolute change in normalized volume.
    """
    if now is None:
        now = time.time()
    return now - last_update > window and abs(volume - last_volume) > threshold


class SyncEngine:
    """Applies bus commands to the receiver connection and the mixer.

    Args:
        connection: Receiver adapter with a ``write(bytes)`` method.
        mixer: Mixer adapter with ``get_volume()`` and ``set_volume(raw)``.
        commands: The command bus.
        settings: Debounce tuning; only the window and threshold are used.
        clock: Source of wall-clock timestamps.
    """

    def __init__(
        self,
        connection,
        mixer,
        commands: queue.Queue,
        settings: SyncSettings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._connection = connection
        self._mixer = mixer
        self._commands = commands
        self._window = settings.debounce_window if settings else DEBOUNCE_WINDOW
        self._threshold = settings.volume_threshold if settings else VOLUME_THRESHOLD
        self._clock = clock
        self.state = SyncState()

    def run_forever(self) -> None:
        """Process commands until the process exits."""
        logger.info("Sync engine started")
        while True:
            self.process(self._commands.get())

    def process(self, command: Command) -> bool:
        """Apply one command.

        Returns:
            True if a write was issued to either device.

        Raises:
            DeviceError: If writing to the mixer or the receiver failed.
            TypeError: If ``command`` is not a bus message.
        """
        if isinstance(command, PollRequest):
            self._connection.write(build_poll_volume())
            return True
        if isinstance(command, RemoteVolumeChanged):
            return self._apply_remote_volume(command.volume)
        if isinstance(command, LocalVolumeChanged):
            return self._apply_local_volume(command.volume)
        raise TypeError(f"Unknown command: {command!r}")

    def _can_update(self, last_update: float, volume: float, now: float) -> bool:
        return can_update(
            last_update,
            self.state.last_known_volume,
            volume,
            now=now,
            window=self._window,
            threshold=self._threshold,
        )

    def _apply_remote_volume(self, volume: float) -> bool:
        now = self._clock()
        if not self._can_update(self.state.last_local_write_at, volume, now):
            logger.debug("Ignoring receiver volume %.3f", volume)
            return False

        _, (min_volume, max_volume) = self._mixer.get_volume()
        raw = to_local_scale(volume, min_volume, max_volume)
        logger.info(
            "Update mixer volume %.3f (receiver %d, mixer %d)",
            volume,
            to_remote_scale(volume),
            raw,
        )
        self._mixer.set_volume(raw)

        self.state.last_known_volume = volume
        self.state.last_remote_write_at = now
        return True

    def _apply_local_volume(self, volume: float) -> bool:
        now = self._clock()
        if not self._can_update(self.state.last_remote_write_at, volume, now):
            logger.debug("Ignoring mixer volume %.3f", volume)
            return False

        remote = to_remote_scale(volume)
        logger.info("Update receiver volume %.3f (receiver %d)", volume, remote)
        self._connection.write(build_set_volume(remote))

        self.state.last_known_volume = volume
        self.state.last_local_write_at = now
        return True
