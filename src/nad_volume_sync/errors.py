"""Exception types shared across the protocol, transport and sync layers."""


class VolumeSyncError(Exception):
    """Base class for all nad-volume-sync errors."""


class MalformedFrame(VolumeSyncError, ValueError):
    """Bytes could not be decoded as a receiver frame."""


class ReadFailure(VolumeSyncError, IOError):
    """A read from the receiver failed or returned too few bytes."""


class DeviceError(VolumeSyncError, ConnectionError):
    """The mixer or the receiver connection is unusable."""


class ConfigError(VolumeSyncError):
    """Invalid startup arguments."""
