"""Sync layer: command bus messages, producers and the engine."""

from .engine import SyncEngine, SyncState, can_update
from .messages import Command, LocalVolumeChanged, PollRequest, RemoteVolumeChanged
from .producers import LocalListener, Poller, RemoteListener
