"""TCP connection to the ArrangementMCP Remote Script running inside Live."""

import json
import logging
import socket
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ArrangementMCP_Server.config import Settings, get_settings
from ArrangementMCP_Server.engine.host import raise_for_response

logger = logging.getLogger("ArrangementMCP")


@dataclass
class AbletonConnection:
    host: str
    port: int
    timeout: float = 15.0
    settle_delay: float = 0.05
    sock: socket.socket = None

    def __post_init__(self):
        self._recv_buffer = ""

    def connect(self) -> bool:
        if self.sock:
            return True

        try:
            self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self.sock.settimeout(5.0)
            self.sock.connect((self.host, self.port))
            self._recv_buffer = ""
            logger.info("Connected to Ableton at %s:%s", self.host, self.port)
            return True
        except OSError as e:
            logger.error("Failed to connect to Ableton: %s", e)
            if self.sock:
                try:
                    self.sock.close()
                except OSError:
                    pass
            self.sock = None
            return False

    def disconnect(self):
        if self.sock:
            try:
                self.sock.close()
            except OSError as e:
                logger.error("Error disconnecting from Ableton: %s", e)
            finally:
                self.sock = None
        self._recv_buffer = ""

    def receive_full_response(self, sock, buffer_size=8192, timeout=15.0):
        """Receive a complete newline-delimited JSON response and return the parsed object"""
        sock.settimeout(timeout)
        while True:
            if '\n' in self._recv_buffer:
                line, self._recv_buffer = self._recv_buffer.split('\n', 1)
                line = line.strip()
                if line:
                    result = json.loads(line)
                    logger.debug("Received complete response (%d chars)", len(line))
                    return result

            chunk = sock.recv(buffer_size)
            if not chunk:
                raise ConnectionError("Connection closed before receiving a response")
            self._recv_buffer += chunk.decode('utf-8')

    # Commands that change the arrangement; each is sent at most once.
    _MODIFYING_COMMANDS = frozenset([
        "duplicate_clip_to_arrangement",
        "create_blank_clip",
        "delete_clip",
        "set_clip_property",
        "apply_note_modifications",
    ])

    def send_command(self, command_type: str, params: Dict[str, Any] = None,
                     timeout: Optional[float] = None) -> Dict[str, Any]:
        """Send a command to Ableton and return its result.

        Read-only commands are retried once on a fresh connection after a
        socket failure. Error responses from Live raise NotFoundError or
        HostCommandError and are not retried.
        """
        is_modifying = command_type in self._MODIFYING_COMMANDS
        max_attempts = 1 if is_modifying else 2
        command = {"type": command_type, "params": params or {}}

        for attempt in range(1, max_attempts + 1):
            if not self.sock and not self.connect():
                raise ConnectionError("Not connected to Ableton")
            try:
                logger.debug("Sending command: %s (attempt %d)", command_type, attempt)
                self.sock.sendall((json.dumps(command) + '\n').encode('utf-8'))
                response = self.receive_full_response(self.sock, timeout=timeout or self.timeout)
            except (OSError, ValueError) as e:
                logger.error("Command '%s' attempt %d failed: %s", command_type, attempt, e)
                self.disconnect()
                if attempt < max_attempts:
                    time.sleep(0.3)
                    logger.info("Reconnecting and retrying %s...", command_type)
                    continue
                raise ConnectionError(f"Command '{command_type}' failed: {e}") from e

            logger.debug("Response status: %s", response.get('status', 'unknown'))
            if response.get("status") == "error":
                logger.error("Ableton error for %s: %s", command_type, response.get('message'))
            result = raise_for_response(command_type, response)
            if is_modifying and self.settle_delay:
                time.sleep(self.settle_delay)
            return result
        raise ConnectionError(f"Command '{command_type}' was not sent")


_ableton_connection = None


def get_ableton_connection(settings: Settings = None) -> AbletonConnection:
    """Get or create a persistent Ableton connection"""
    global _ableton_connection
    settings = settings or get_settings()

    if _ableton_connection is not None:
        try:
            if _ableton_connection.sock is None:
                raise ConnectionError("Socket is None")
            _ableton_connection.sock.getpeername()
            return _ableton_connection
        except OSError as e:
            logger.warning("Existing connection is no longer valid: %s", e)
            _ableton_connection.disconnect()
            _ableton_connection = None

    max_attempts = 3
    for attempt in range(1, max_attempts + 1):
        logger.info("Connecting to Ableton (attempt %d/%d)...", attempt, max_attempts)
        connection = AbletonConnection(
            host=settings.host, port=settings.port,
            timeout=settings.timeout, settle_delay=settings.settle_delay,
        )
        if connection.connect():
            try:
                connection.send_command("get_song_info")
            except ConnectionError as e:
                logger.error("Connection validation failed: %s", e)
                connection.disconnect()
            else:
                logger.info("Created new persistent connection to Ableton")
                _ableton_connection = connection
                return connection
        if attempt < max_attempts:
            time.sleep(1.0)

    logger.error("Failed to connect to Ableton after multiple attempts")
    raise ConnectionError("Could not connect to Ableton. Make sure the Remote Script is running.")


def close_ableton_connection() -> None:
    global _ableton_connection
    if _ableton_connection:
        logger.info("Disconnecting from Ableton on shutdown")
        _ableton_connection.disconnect()
        _ableton_connection = None
