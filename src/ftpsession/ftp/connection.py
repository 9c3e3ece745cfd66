"""FTP connection state tracking for the FTP session client.

Provides SessionState enum, FTPConnectionConfig dataclass,
and ConnectionGuard class for guarding operations on the connection.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from ftplib import FTP
from typing import Optional

from ftpsession.ftp.exceptions import FTPNotConnectedError, FTPStateError

# Leading URI scheme such as "ftp://"
SCHEME_PATTERN = re.compile(r"^.+?://")


def strip_scheme(server: str) -> str:
    """
    Remove a leading URI scheme from a server string.

    Args:
        server: Host, optionally prefixed like "ftp://example.com"

    Returns:
        Bare host name
    """
    return SCHEME_PATTERN.sub("", server, count=1)


class SessionState(Enum):
    """FTP session state."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    CLOSED = "closed"


# States in which a control connection is open
LIVE_STATES = frozenset({
    SessionState.CONNECTED,
    SessionState.AUTHENTICATED,
    SessionState.READY,
})


@dataclass
class FTPConnectionConfig:
    """FTP connection configuration."""
    host: str
    port: int = 21
    username: str = "anonymous"
    passive_mode: bool = True
    timeout: int = 90

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.host:
            raise ValueError("Host is required")
        if not 1 <= self.port <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {self.port}")
        if not 1 <= self.timeout <= 600:
            raise ValueError(f"Timeout must be between 1 and 600, got {self.timeout}")


class ConnectionGuard:
    """Tracks the connection handle and lifecycle state of a session."""

    def __init__(self):
        """Initialize the guard in DISCONNECTED state."""
        self._ftp: Optional[FTP] = None
        self._state = SessionState.DISCONNECTED
        self._connected_at: Optional[datetime] = None
        self._last_activity: Optional[datetime] = None

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """True if a live connection handle exists."""
        return self._ftp is not None and self._state in LIVE_STATES

    @property
    def connected_at(self) -> Optional[datetime]:
        """Timestamp when connection was established."""
        return self._connected_at

    @property
    def last_activity(self) -> Optional[datetime]:
        """Timestamp of last operation on the connection."""
        return self._last_activity

    def require_handle(self, operation: str) -> FTP:
        """
        Get the connection handle for an operation.

        Args:
            operation: Name of the operation, used in the error message

        Returns:
            Live FTP handle

        Raises:
            FTPNotConnectedError: If there is no live connection
        """
        if not self.is_connected:
            raise FTPNotConnectedError(operation)
        self._last_activity = datetime.now()
        return self._ftp

    def require_state(self, operation: str, *allowed: SessionState) -> None:
        """
        Check the current state is one of the allowed states.

        Raises:
            FTPNotConnectedError: If a live state is required and there is none
            FTPStateError: If the state is otherwise not allowed
        """
        if self._state in allowed:
            return
        if self._state not in LIVE_STATES and LIVE_STATES.intersection(allowed):
            raise FTPNotConnectedError(operation)
        raise FTPStateError(operation, self._state.value)

    def attach(self, ftp: FTP) -> None:
        """Take ownership of a freshly connected handle."""
        self._ftp = ftp
        self._state = SessionState.CONNECTED
        self._connected_at = datetime.now()
        self._last_activity = self._connected_at

    def mark_authenticated(self) -> None:
        """Record a successful login."""
        if self._state == SessionState.CONNECTED:
            self._state = SessionState.AUTHENTICATED

    def mark_ready(self) -> None:
        """Record that the transfer mode has been negotiated."""
        self._state = SessionState.READY

    def release(self) -> Optional[FTP]:
        """
        Give up the handle and move to CLOSED.

        Returns:
            The handle if one was held, None on every later call
        """
        ftp = self._ftp
        self._ftp = None
        self._state = SessionState.CLOSED
        self._connected_at = None
        return ftp
