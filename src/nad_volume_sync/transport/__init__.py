"""Device adapters: receiver TCP connection and ALSA mixer."""

from .alsa_mixer import AlsaMixer, ChangeEvent
from .tcp_connection import ReceiverConnection
