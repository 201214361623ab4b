"""ALSA mixer access through ``pyalsaaudio``.

Volumes are read and written in raw mixer units together with the
control's raw playback range, so scaling stays in one place
(:mod:`nad_volume_sync.utils.scaling`). Change notifications come from
polling the mixer's file descriptors.
"""

from __future__ import annotations

import logging
import select
from dataclasses import dataclass

from ..config import MIXER_CONTROL
from ..errors import DeviceError

logger = logging.getLogger(__name__)


@dataclass
class ChangeEvent:
    """One wake-up of the mixer event loop."""

    count: int


class AlsaMixer:
    """Playback volume of one ALSA simple mixer control.

    Usage::

        mixer = AlsaMixer("hw:1")
        mixer.open()
        raw, (lo, hi) = mixer.get_volume()
        mixer.set_volume(hi)
        event = mixer.wait_for_change_event(10.0)
        mixer.close()
    """

    def __init__(
        self,
        device: str,
        control: str = MIXER_CONTROL,
        control_id: int = 0,
    ) -> None:
        self._device = device
        self._control = control
        self._control_id = control_id
        self._alsaaudio = None
        self._events = None
        self._poller = None

    @property
    def opened(self) -> bool:
        return self._events is not None

    def open(self) -> None:
        """Open the control and subscribe to its change events.

        Raises:
            DeviceError: If the card or the control does not exist.
        """
        import alsaaudio

        self._alsaaudio = alsaaudio
        self._events = self._open_mixer()

        self._poller = select.poll()
        for fd, eventmask in self._events.polldescriptors():
            self._poller.register(fd, eventmask)

        logger.info(
            "Opened mixer control '%s' on %s", self._control, self._device
        )

    def close(self) -> None:
        """Release the mixer handle."""
        if self._events is None:
            return

        try:
            self._events.close()
        except self._alsaaudio.ALSAAudioError as e:
            logger.warning("Error closing mixer: %s", e)
        finally:
            self._events = None
            self._poller = None

    def _open_mixer(self):
        if self._alsaaudio is None:
            raise DeviceError("Mixer is not open")

        try:
            return self._alsaaudio.Mixer(
                control=self._control,
                id=self._control_id,
                device=self._device,
            )
        except self._alsaaudio.ALSAAudioError as e:
            raise DeviceError(
                f"Mixer control '{self._control}' not found on {self._device}: {e}"
            ) from e

    def get_volume(self) -> tuple[int, tuple[int, int]]:
        """Return the raw playback volume and the raw playback range.

        A fresh handle is opened for every read; a long-lived handle only
        sees new values after its events have been handled.
        """
        alsaaudio = self._alsaaudio
        mixer = self._open_mixer()
        try:
            volumes = mixer.getvolume(units=alsaaudio.VOLUME_UNITS_RAW)
            min_volume, max_volume = mixer.getrange(units=alsaaudio.VOLUME_UNITS_RAW)
        except alsaaudio.ALSAAudioError as e:
            raise DeviceError(f"Could not read volume on {self._device}: {e}") from e
        finally:
            mixer.close()

        return volumes[0], (min_volume, max_volume)

    def set_volume(self, volume: int) -> None:
        """Set every playback channel to a raw volume value."""
        alsaaudio = self._alsaaudio
        mixer = self._open_mixer()
        try:
            mixer.setvolume(volume, units=alsaaudio.VOLUME_UNITS_RAW)
        except alsaaudio.ALSAAudioError as e:
            raise DeviceError(f"Could not set volume on {self._device}: {e}") from e
        finally:
            mixer.close()

    def wait_for_change_event(self, timeout: float) -> ChangeEvent | None:
        """Block until the control changes or ``timeout`` seconds pass.

        Returns:
            A ``ChangeEvent`` if the mixer reported events, otherwise None.
        """
        if self._poller is None:
            raise DeviceError("Mixer is not open")

        ready = self._poller.poll(int(timeout * 1000))
        if not ready:
            return None

        try:
            count = self._events.handleevents()
        except self._alsaaudio.ALSAAudioError as e:
            raise DeviceError(f"Mixer event handling failed: {e}") from e

        if not count:
            return None
        return ChangeEvent(count=count)
