"""Background activities that turn device events into bus commands.

Producers only ever ``put`` onto the command bus. None of them reads or
writes the engine's state.
"""

from __future__ import annotations

import logging
import queue
import threading
import time

from ..config import EVENT_TIMEOUT, POLL_INTERVAL, READ_SIZE
from ..errors import MalformedFrame, ReadFailure
from ..protocol.framing import FRAME_SIZE
from ..protocol.parser import extract_volume
from ..utils.scaling import from_local_scale, from_remote_scale
from .messages import LocalVolumeChanged, PollRequest, RemoteVolumeChanged

logger = logging.getLogger(__name__)


class _Producer:
    name = "producer"

    def __init__(self, commands: queue.Queue) -> None:
        self._commands = commands
        self._thread: threading.Thread | None = None

    def start(self) -> threading.Thread:
        """Run ``run_forever`` in a daemon thread."""
        self._thread = threading.Thread(
            target=self.run_forever, name=self.name, daemon=True
        )
        self._thread.start()
        logger.debug("Started %s thread", self.name)
        return self._thread

    def run_forever(self) -> None:
        raise NotImplementedError


class Poller(_Producer):
    """Requests the receiver volume at a fixed interval."""

    name = "poller"

    def __init__(self, commands: queue.Queue, interval: float = POLL_INTERVAL) -> None:
        super().__init__(commands)
        self.interval = interval

    def run_forever(self) -> None:
        while True:
            self._commands.put(PollRequest())
            time.sleep(self.interval)


class RemoteListener(_Producer):
    """Reads receiver reports and forwards volume changes."""

    name = "remote-listener"

    def __init__(
        self,
        connection,
        commands: queue.Queue,
        read_size: int = READ_SIZE,
    ) -> None:
        super().__init__(commands)
        self._connection = connection
        self._read_size = read_size

    def run_forever(self) -> None:
        while True:
            self.read_once()

    def read_once(self) -> RemoteVolumeChanged | None:
        """Block on one read and forward the last volume it reports.

        Short reads and reads without a volume frame are logged and
        dropped. ``DeviceError`` from the connection propagates.
        """
        try:
            data = self._connection.read(self._read_size)
            if len(data) < FRAME_SIZE:
                raise ReadFailure(f"Short read: {len(data)} byte(s)")
            volume = extract_volume(data)
        except ReadFailure as e:
            logger.warning("Failed reading receiver: %s", e)
            return None
        except MalformedFrame as e:
            logger.warning("Dropped receiver data: %s", e)
            return None

        command = RemoteVolumeChanged(volume=from_remote_scale(volume))
        logger.debug("Receiver reported volume %d", volume)
        self._commands.put(command)
        return command


class LocalListener(_Producer):
    """Waits for mixer change events and forwards the new volume."""

    name = "local-listener"

    def __init__(
        self,
        mixer,
        commands: queue.Queue,
        timeout: float = EVENT_TIMEOUT,
    ) -> None:
        super().__init__(commands)
        self._mixer = mixer
        self._timeout = timeout

    def run_forever(self) -> None:
        while True:
            self.listen_once()

    def listen_once(self) -> LocalVolumeChanged | None:
        """Wait up to the timeout for one mixer event."""
        event = self._mixer.wait_for_change_event(self._timeout)
        if event is None:
            return None

        raw, (min_volume, max_volume) = self._mixer.get_volume()
        command = LocalVolumeChanged(
            volume=from_local_scale(raw, min_volume, max_volume)
        )
        logger.debug("Mixer reported volume %d in [%d, %d]", raw, min_volume, max_volume)
        self._commands.put(command)
        return command
