"""FTP session facade for the FTP session client.

FTPSession is the single entry point for application code. Every
operation checks the connection guard, runs one or more transport
primitives, maps failures to typed errors and returns the session so
calls can be chained.
"""

import logging
import socket
from pathlib import Path
from typing import List, Optional, Union

from ftpsession.ftp.connection import (
    ConnectionGuard,
    FTPConnectionConfig,
    LIVE_STATES,
    SessionState,
    strip_scheme,
)
from ftpsession.ftp.exceptions import (
    FTPAuthenticationError,
    FTPConnectionError,
    FTPDirectoryRemovalError,
    FTPError,
    FTPInvalidPathError,
    FTPModeNegotiationError,
    FTPOperationError,
    FTPTimeoutError,
    FTPUploadError,
)
from ftpsession.ftp.modes import TransferMode, resolve_transfer_mode
from ftpsession.ftp.remover import DirectoryRemover, EntryKind, RemovalReport
from ftpsession.ftp.result import OperationResult
from ftpsession.ftp.transport import FTPTransport

logger = logging.getLogger("ftpsession.session")

LocalPath = Union[str, Path]


def _require_path(path: Optional[str], operation: str) -> None:
    """Raise FTPInvalidPathError for an empty path."""
    if path is None or str(path) == "":
        raise FTPInvalidPathError(operation)


class FTPSession:
    """
    Stateful FTP session over a single control connection.

    Not safe for concurrent use: state and handle are mutated in place
    by every operation.
    """

    DEFAULT_PORT = 21
    DEFAULT_TIMEOUT = 90

    def __init__(self, transport: Optional[FTPTransport] = None):
        """
        Initialize an unconnected session.

        Args:
            transport: Primitive FTP operations, defaults to FTPTransport()
        """
        self._transport = transport or FTPTransport()
        self._guard = ConnectionGuard()
        self._remover = DirectoryRemover(self)

    @classmethod
    def create_connection(
        cls,
        username: str,
        password: str,
        server: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        passive: bool = True,
        transport: Optional[FTPTransport] = None
    ) -> "FTPSession":
        """
        Connect, log in and set the transfer mode in one call.

        Raises:
            FTPConnectionError: If the server cannot be reached
            FTPAuthenticationError: If login fails
            FTPModeNegotiationError: If passive mode cannot be set

        A connection opened before a later step fails is closed again.
        """
        session = cls(transport)
        try:
            return (
                session
                .connect(server, port, timeout)
                .login_with_auth_pair(username, password)
                .set_passive_mode(passive)
            )
        except FTPError:
            session.close()
            raise

    @classmethod
    def from_config(
        cls,
        config: FTPConnectionConfig,
        password: str = "",
        transport: Optional[FTPTransport] = None
    ) -> "FTPSession":
        """Open a ready session from a connection configuration."""
        return cls.create_connection(
            config.username,
            password,
            config.host,
            port=config.port,
            timeout=config.timeout,
            passive=config.passive_mode,
            transport=transport,
        )

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._guard.state

    @property
    def is_connected(self) -> bool:
        """True if a live connection handle exists."""
        return self._guard.is_connected

    @property
    def guard(self) -> ConnectionGuard:
        """Connection guard tracking state and timestamps."""
        return self._guard

    @property
    def last_removal(self) -> Optional[RemovalReport]:
        """Report of the last successful delete_directory."""
        return self._remover.last_report

    def __enter__(self) -> "FTPSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _failure(self, operation: str, path: str, detail: Optional[str] = None) -> FTPOperationError:
        """Build the typed error for a failed primitive."""
        error = FTPOperationError(operation, path, self._transport.last_error, detail)
        logger.warning(str(error))
        return error

    # Connection lifecycle

    def connect(
        self,
        server: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT
    ) -> "FTPSession":
        """
        Open the control connection.

        Args:
            server: Host name, optionally with a scheme prefix ("ftp://host")
            port: Control port
            timeout: Connect timeout in seconds

        Raises:
            FTPStateError: If the session is not DISCONNECTED
            FTPConnectionError: If the connection fails
            FTPTimeoutError: If the connection attempt times out
        """
        self._guard.require_state("connect", SessionState.DISCONNECTED)
        host = strip_scheme(server)

        ftp = self._transport.connect(host, port, timeout)
        if ftp is None:
            error = self._transport.last_error
            if isinstance(error, socket.timeout):
                raise FTPTimeoutError(host, port, timeout, error)
            raise FTPConnectionError(host, port, error)

        self._guard.attach(ftp)
        logger.info(f"Connected to {host}:{port}")
        return self

    def login_with_auth_pair(self, username: str, password: str) -> "FTPSession":
        """
        Log in on the open connection.

        A failed login leaves the session connected so it can be retried.

        Raises:
            FTPNotConnectedError: If there is no connection
            FTPAuthenticationError: If the server rejects the credentials
        """
        self._guard.require_state("login", *LIVE_STATES)
        ftp = self._guard.require_handle("login")

        if not self._transport.login(ftp, username, password):
            raise FTPAuthenticationError(username, self._transport.last_error)

        self._guard.mark_authenticated()
        logger.info(f"Logged in as {username}")
        return self

    def set_passive_mode(self, passive: bool) -> "FTPSession":
        """
        Select passive (True) or active (False) data connections.

        Raises:
            FTPNotConnectedError: If there is no connection
            FTPStateError: If the session is not logged in
            FTPModeNegotiationError: If the mode cannot be set
        """
        self._guard.require_state(
            "set passive mode",
            SessionState.AUTHENTICATED,
            SessionState.READY,
        )
        ftp = self._guard.require_handle("set passive mode")

        if not self._transport.set_passive(ftp, passive):
            raise FTPModeNegotiationError(passive, self._transport.last_error)

        self._guard.mark_ready()
        return self

    def close(self) -> bool:
        """
        Close the connection.

        Safe to call any number of times, in any state. Never raises.

        Returns:
            Always True
        """
        ftp = self._guard.release()
        if ftp is not None:
            try:
                self._transport.close(ftp)
            except Exception as e:
                logger.debug(f"Ignoring error while closing: {e}")
            logger.info("Connection closed")
        return True

    # Directory operations

    def chdir(self, path: str) -> "FTPSession":
        """Change the remote working directory."""
        _require_path(path, "chdir")
        ftp = self._guard.require_handle("chdir")

        if not self._transport.change_dir(ftp, path):
            raise self._failure("chdir", path)
        return self

    def mkdir(self, path: str, permissions: Optional[int] = None) -> "FTPSession":
        """
        Create a remote directory, then optionally chmod it.

        The chmod is a separate step: if it fails the directory still
        exists and the error reports the chmod.

        Args:
            path: Remote directory path
            permissions: Mode bits such as 0o755
        """
        _require_path(path, "mkdir")
        ftp = self._guard.require_handle("mkdir")

        if not self._transport.make_dir(ftp, path):
            raise self._failure("mkdir", path)

        if permissions is not None:
            self.chmod(path, permissions)
        return self

    def list(self, path: str = ".") -> List[str]:
        """
        List entry names in a remote directory.

        Returns:
            Names as reported by the server, possibly empty
        """
        _require_path(path, "list")
        ftp = self._guard.require_handle("list")
        return self._transport.list_names(ftp, path)

    def delete_directory(self, path: str) -> "FTPSession":
        """
        Delete a remote directory and everything in it.

        Raises:
            FTPInvalidPathError: If path is empty
            FTPNotConnectedError: If there is no connection
            FTPDirectoryRemovalError: If a directory cannot be removed
        """
        _require_path(path, "delete directory")
        self._guard.require_handle("delete directory")
        self._remover.remove(path)
        return self

    def probe_delete_file(self, path: str) -> EntryKind:
        """
        Try to delete an entry as a file.

        A refused delete is the expected outcome for directories and is
        reported as EntryKind.DIRECTORY instead of raising.
        """
        _require_path(path, "delete file")
        ftp = self._guard.require_handle("delete file")

        if self._transport.delete_file(ftp, path):
            return EntryKind.FILE
        return EntryKind.DIRECTORY

    def remove_empty_directory(self, path: str) -> "FTPSession":
        """
        Remove a directory that is expected to be empty.

        Raises:
            FTPDirectoryRemovalError: If the server refuses
        """
        _require_path(path, "remove directory")
        ftp = self._guard.require_handle("remove directory")

        if not self._transport.remove_dir(ftp, path):
            error = FTPDirectoryRemovalError(path, self._transport.last_error)
            logger.warning(str(error))
            raise error
        return self

    # File operations

    def upload(
        self,
        local_path: LocalPath,
        remote_path: str,
        mode: Optional[TransferMode] = None,
        permissions: Optional[int] = None
    ) -> "FTPSession":
        """
        Upload a local file, then optionally chmod it.

        Args:
            local_path: File to send
            remote_path: Destination path on the server
            mode: Transfer mode, inferred from the local file name if None
            permissions: Mode bits applied after the upload

        Raises:
            FTPUploadError: If the local file is missing or the upload fails
            FTPOperationError: If the chmod step fails (file stays uploaded)
        """
        _require_path(local_path, "upload")
        _require_path(remote_path, "upload")
        ftp = self._guard.require_handle("upload")

        if not Path(local_path).is_file():
            raise FTPUploadError(
                str(local_path),
                remote_path,
                FileNotFoundError(f"Local file is missing: {local_path}")
            )

        mode = resolve_transfer_mode(str(local_path), mode)
        logger.debug(f"Uploading {local_path} to {remote_path} ({mode.value})")

        if not self._transport.put(ftp, remote_path, local_path, mode):
            error = FTPUploadError(str(local_path), remote_path, self._transport.last_error)
            logger.warning(str(error))
            raise error

        if permissions is not None:
            self.chmod(remote_path, permissions)
        return self

    def download(
        self,
        remote_path: str,
        local_path: LocalPath,
        mode: Optional[TransferMode] = None
    ) -> "FTPSession":
        """
        Download a remote file.

        Args:
            remote_path: File on the server
            local_path: Destination on the local file system
            mode: Transfer mode, inferred from the remote file name if None
        """
        _require_path(remote_path, "download")
        _require_path(local_path, "download")
        ftp = self._guard.require_handle("download")

        mode = resolve_transfer_mode(remote_path, mode)
        logger.debug(f"Downloading {remote_path} to {local_path} ({mode.value})")

        if not self._transport.get(ftp, local_path, remote_path, mode):
            raise self._failure("download", remote_path, f"to {local_path}")
        return self

    def rename(self, old_name: str, new_name: str) -> "FTPSession":
        """Rename or move a remote file or directory."""
        _require_path(old_name, "rename")
        _require_path(new_name, "rename")
        ftp = self._guard.require_handle("rename")

        if not self._transport.rename(ftp, old_name, new_name):
            raise self._failure("rename", old_name, f"to {new_name}")
        return self

    def delete_file(self, path: str) -> "FTPSession":
        """Delete a remote file."""
        _require_path(path, "delete file")
        ftp = self._guard.require_handle("delete file")

        if not self._transport.delete_file(ftp, path):
            raise self._failure("delete", path)
        return self

    def chmod(self, path: str, permissions: int) -> "FTPSession":
        """
        Change permissions of a remote file or directory.

        Args:
            path: Remote path
            permissions: Mode bits such as 0o644
        """
        _require_path(path, "chmod")
        ftp = self._guard.require_handle("chmod")

        if not self._transport.chmod(ftp, int(permissions), path):
            raise self._failure("chmod", path, f"mode {int(permissions):o}")
        return self

    def attempt(self, operation: str, *args, **kwargs) -> OperationResult:
        """
        Run a public operation and capture its outcome.

        Args:
            operation: Method name, e.g. "mkdir" or "upload"

        Returns:
            OperationResult holding this session and any FTPError raised
        """
        try:
            getattr(self, operation)(*args, **kwargs)
        except FTPError as e:
            return OperationResult(operation=operation, session=self, success=False, error=e)
        return OperationResult(operation=operation, session=self, success=True)
