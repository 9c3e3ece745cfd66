"""Operation results for the FTP session client.

Lets callers run session operations without exception handling and
stop a sequence at the first failure.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ftpsession.ftp.exceptions import FTPError

if TYPE_CHECKING:
    from ftpsession.ftp.session import FTPSession


@dataclass
class OperationResult:
    """Result of a single session operation."""
    operation: str
    session: "FTPSession"
    success: bool
    error: Optional[FTPError] = None

    def then(self, operation: str, *args, **kwargs) -> "OperationResult":
        """
        Run the next operation if this one succeeded.

        A failed result is returned unchanged so the first failure is
        the one reported at the end of a chain.
        """
        if not self.success:
            return self
        return self.session.attempt(operation, *args, **kwargs)

    def unwrap(self) -> "FTPSession":
        """Return the session, or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.session
