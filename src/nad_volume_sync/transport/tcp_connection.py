"""TCP connection to the receiver's control port.

The receiver listens on port 50001 and speaks the 5-byte frame protocol in
both directions. One socket is shared by the sync engine, which writes
commands, and the remote listener, which reads reports; a socket supports
a concurrent ``sendall`` and ``recv`` from two threads.
"""

from __future__ import annotations

import logging
import socket

from ..config import READ_SIZE, RECEIVER_PORT
from ..errors import DeviceError, ReadFailure

logger = logging.getLogger(__name__)


class ReceiverConnection:
    """Manages the TCP connection to the receiver.

    Usage::

        conn = ReceiverConnection("192.168.1.20")
        conn.open()
        conn.write(frame_bytes)
        data = conn.read()
        conn.close()
    """

    def __init__(self, host: str, port: int = RECEIVER_PORT) -> None:
        self._host = host
        self._port = port
        self._sock: socket.socket | None = None

    @property
    def connected(self) -> bool:
        return self._sock is not None

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    def open(self) -> None:
        """Connect to the receiver with Nagle's algorithm disabled.

        Raises:
            DeviceError: If the receiver cannot be reached.
        """
        try:
            sock = socket.create_connection((self._host, self._port))
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError as e:
            raise DeviceError(
                f"Could not connect to receiver at {self.address}: {e}"
            ) from e

        self._sock = sock
        logger.info("Connected to receiver at %s", self.address)

    def close(self) -> None:
        """Close the connection."""
        if self._sock is None:
            return

        try:
            self._sock.close()
        except OSError as e:
            logger.warning("Error closing connection: %s", e)
        finally:
            self._sock = None
            logger.info("Disconnected from %s", self.address)

    def __enter__(self) -> ReceiverConnection:
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def write(self, data: bytes) -> int:
        """Send a command to the receiver.

        Returns:
            Number of bytes written.

        Raises:
            DeviceError: If not connected or the send fails.
        """
        if self._sock is None:
            raise DeviceError("Not connected to receiver")

        try:
            self._sock.sendall(data)
        except OSError as e:
            raise DeviceError(f"Write to {self.address} failed: {e}") from e

        logger.debug("Sent %s", data.hex(" "))
        return len(data)

    def read(self, size: int = READ_SIZE) -> bytes:
        """Block until the receiver sends data and return it.

        Raises:
            DeviceError: If not connected or the receiver closed the
                connection.
            ReadFailure: If the read failed for any other reason.
        """
        if self._sock is None:
            raise DeviceError("Not connected to receiver")

        try:
            data = self._sock.recv(size)
        except ConnectionError as e:
            raise DeviceError(f"Connection to {self.address} lost: {e}") from e
        except OSError as e:
            raise ReadFailure(f"Read from {self.address} failed: {e}") from e

        if not data:
            raise DeviceError(f"Receiver at {self.address} closed the connection")

        logger.debug("Received %s", data.hex(" "))
        return data
