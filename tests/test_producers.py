"""Tests for the poller and the two device listeners."""

import queue
from unittest.mock import MagicMock, patch

import pytest

from nad_volume_sync.errors import DeviceError, ReadFailure
from nad_volume_sync.protocol.framing import build_frame
from nad_volume_sync.sync.messages import (
    LocalVolumeChanged,
    PollRequest,
    RemoteVolumeChanged,
)
from nad_volume_sync.sync.producers import LocalListener, Poller, RemoteListener
from nad_volume_sync.transport.alsa_mixer import ChangeEvent


class StopLoop(Exception):
    pass


def _drain(commands: queue.Queue) -> list:
    items = []
    while not commands.empty():
        items.append(commands.get_nowait())
    return items


# ─── POLLER ──────────────────────────────────────────────────────────

def test_poller_sends_then_sleeps():
    commands = queue.Queue()
    poller = Poller(commands, interval=10.0)

    with patch(
        "nad_volume_sync.sync.producers.time.sleep",
        side_effect=[None, StopLoop()],
    ) as sleep:
        with pytest.raises(StopLoop):
            poller.run_forever()

    assert _drain(commands) == [PollRequest(), PollRequest()]
    sleep.assert_called_with(10.0)


def test_producer_start_runs_daemon_thread():
    commands = queue.Queue()
    listener = RemoteListener(MagicMock(), commands)

    with patch.object(listener, "run_forever") as run_forever:
        thread = listener.start()
        thread.join(timeout=1)

    assert thread.daemon
    assert thread.name == "remote-listener"
    run_forever.assert_called_once_with()


# ─── REMOTE LISTENER ─────────────────────────────────────────────────

def test_remote_listener_forwards_volume():
    commands = queue.Queue()
    connection = MagicMock()
    connection.read.return_value = build_frame(0x04, 90)
    listener = RemoteListener(connection, commands, read_size=20)

    command = listener.read_once()

    assert command == RemoteVolumeChanged(volume=0.5)
    assert _drain(commands) == [RemoteVolumeChanged(volume=0.5)]
    connection.read.assert_called_once_with(20)


def test_remote_listener_uses_last_volume():
    commands = queue.Queue()
    connection = MagicMock()
    connection.read.return_value = (
        build_frame(0x04, 0xF0) + build_frame(0x09, 0x01) + build_frame(0x04, 0x2D)
    )
    listener = RemoteListener(connection, commands)

    listener.read_once()

    assert _drain(commands) == [RemoteVolumeChanged(volume=0.25)]


def test_remote_listener_clamps_out_of_range():
    commands = queue.Queue()
    connection = MagicMock()
    connection.read.return_value = bytes([0, 1, 2, 4, 0xF0])

    RemoteListener(connection, commands).read_once()

    assert _drain(commands) == [RemoteVolumeChanged(volume=1.0)]


def test_remote_listener_short_read(caplog):
    commands = queue.Queue()
    connection = MagicMock()
    connection.read.return_value = b"\x00\x01\x02\x04"

    assert RemoteListener(connection, commands).read_once() is None
    assert commands.empty()
    assert "Short read" in caplog.text


def test_remote_listener_read_failure_is_not_fatal():
    commands = queue.Queue()
    connection = MagicMock()
    connection.read.side_effect = ReadFailure("timed out")

    assert RemoteListener(connection, commands).read_once() is None
    assert commands.empty()


def test_remote_listener_without_volume_frame():
    commands = queue.Queue()
    connection = MagicMock()
    connection.read.return_value = build_frame(0x09, 0x01) + build_frame(0x0A, 0x00)

    assert RemoteListener(connection, commands).read_once() is None
    assert commands.empty()


def test_remote_listener_closed_connection_is_fatal():
    connection = MagicMock()
    connection.read.side_effect = DeviceError("closed")

    with pytest.raises(DeviceError):
        RemoteListener(connection, queue.Queue()).run_forever()


def test_remote_listener_keeps_reading_after_bad_data():
    commands = queue.Queue()
    connection = MagicMock()
    connection.read.side_effect = [
        b"\x00",
        build_frame(0x03, 0x01),
        build_frame(0x04, 0x5A),
        DeviceError("closed"),
    ]

    with pytest.raises(DeviceError):
        RemoteListener(connection, commands).run_forever()

    assert _drain(commands) == [RemoteVolumeChanged(volume=0.5)]


# ─── LOCAL LISTENER ──────────────────────────────────────────────────

def test_local_listener_forwards_volume():
    commands = queue.Queue()
    mixer = MagicMock()
    mixer.wait_for_change_event.return_value = ChangeEvent(count=1)
    mixer.get_volume.return_value = (64, (0, 128))
    listener = LocalListener(mixer, commands, timeout=10.0)

    command = listener.listen_once()

    assert command == LocalVolumeChanged(volume=0.5)
    assert _drain(commands) == [LocalVolumeChanged(volume=0.5)]
    mixer.wait_for_change_event.assert_called_once_with(10.0)


def test_local_listener_timeout_rearms():
    commands = queue.Queue()
    mixer = MagicMock()
    mixer.wait_for_change_event.return_value = None

    assert LocalListener(mixer, commands).listen_once() is None
    assert commands.empty()
    mixer.get_volume.assert_not_called()


def test_local_listener_loop():
    commands = queue.Queue()
    mixer = MagicMock()
    mixer.wait_for_change_event.side_effect = [
        None,
        ChangeEvent(count=2),
        StopLoop(),
    ]
    mixer.get_volume.return_value = (-10239, (-10239, 400))

    with pytest.raises(StopLoop):
        LocalListener(mixer, commands).run_forever()

    assert _drain(commands) == [LocalVolumeChanged(volume=0.0)]


def test_local_listener_device_error_is_fatal():
    mixer = MagicMock()
    mixer.wait_for_change_event.return_value = ChangeEvent(count=1)
    mixer.get_volume.side_effect = DeviceError("card gone")

    with pytest.raises(DeviceError):
        LocalListener(mixer, queue.Queue()).listen_once()
