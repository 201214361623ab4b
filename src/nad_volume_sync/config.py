"""Runtime settings and tuning constants."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigError

RECEIVER_PORT = 50001
POLL_INTERVAL = 10.0  # seconds between receiver volume polls
DEBOUNCE_WINDOW = 2.0  # seconds an echo of our own write is ignored
VOLUME_THRESHOLD = 0.005  # smallest normalized change worth propagating
READ_SIZE = 20  # bytes per socket read, room for four frames
EVENT_TIMEOUT = 10.0  # seconds to wait for a mixer event before re-arming
MIXER_CONTROL = "Master"


@dataclass(frozen=True)
class SyncSettings:
    """Everything needed to start a sync session."""

    device: str
    host: str
    port: int = RECEIVER_PORT
    poll_interval: float = POLL_INTERVAL
    debounce_window: float = DEBOUNCE_WINDOW
    volume_threshold: float = VOLUME_THRESHOLD
    read_size: int = READ_SIZE
    event_timeout: float = EVENT_TIMEOUT
    mixer_control: str = MIXER_CONTROL

    def validate(self) -> SyncSettings:
        """Raise ``ConfigError`` unless device and host are usable."""
        if not self.device or not self.device.strip():
            raise ConfigError("No sound card name specified")
        if not self.host or not self.host.strip():
            raise ConfigError("No receiver address specified")
        return self
