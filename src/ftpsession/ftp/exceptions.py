"""FTP-specific exceptions for the FTP session client.

Custom exception hierarchy for session operations. Every error carries
the operation and path it concerns so failures can be diagnosed from
the message alone.
"""

from typing import Optional


class FTPError(Exception):
    """Base exception for all FTP-related errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class FTPConnectionError(FTPError):
    """Failed to establish FTP connection."""

    def __init__(self, host: str, port: int, original_error: Exception = None):
        self.host = host
        self.port = port
        message = f"Cannot connect to FTP server {host}:{port}"
        super().__init__(message, original_error)


class FTPTimeoutError(FTPConnectionError):
    """Connection attempt timed out."""

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float,
        original_error: Exception = None
    ):
        super().__init__(host, port, original_error)
        self.timeout = timeout
        self.message = f"Connection to {host}:{port} timed out after {timeout} seconds"


class FTPAuthenticationError(FTPError):
    """FTP authentication (login) failed."""

    def __init__(self, username: str, original_error: Exception = None):
        self.username = username
        message = f"Authentication failed for user '{username}'"
        super().__init__(message, original_error)


class FTPModeNegotiationError(FTPError):
    """Passive/active mode could not be set."""

    def __init__(self, passive: bool, original_error: Exception = None):
        self.passive = passive
        message = f"Cannot set FTP passive mode to {passive}"
        super().__init__(message, original_error)


class FTPNotConnectedError(FTPError):
    """Operation attempted without active FTP connection."""

    def __init__(self, operation: str = "Operation"):
        self.operation = operation
        message = f"{operation} requires an active FTP connection"
        super().__init__(message)


class FTPStateError(FTPError):
    """Operation is not legal in the current session state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        message = f"Cannot {operation} while session is {state}"
        super().__init__(message)


class FTPInvalidPathError(FTPError):
    """An empty path was given to a path-taking operation."""

    def __init__(self, operation: str):
        self.operation = operation
        message = f"Illegal empty path for {operation}"
        super().__init__(message)


class FTPOperationError(FTPError):
    """A primitive FTP operation failed."""

    def __init__(
        self,
        operation: str,
        path: str,
        original_error: Exception = None,
        detail: Optional[str] = None
    ):
        self.operation = operation
        self.path = path
        message = f"Failed to {operation} '{path}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, original_error)


class FTPUploadError(FTPOperationError):
    """Failed to upload file via FTP."""

    def __init__(
        self,
        local_path: str,
        remote_path: str,
        original_error: Exception = None
    ):
        self.local_path = local_path
        self.remote_path = remote_path
        super().__init__("upload", remote_path, original_error)
        self.message = f"Failed to upload '{local_path}' to '{remote_path}'"


class FTPDirectoryRemovalError(FTPError):
    """Directory could not be removed after its contents were cleared."""

    def __init__(self, path: str, original_error: Exception = None):
        self.path = path
        message = f"Failed to delete directory '{path}'"
        super().__init__(message, original_error)
