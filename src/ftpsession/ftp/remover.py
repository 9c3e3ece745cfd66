"""Recursive directory removal for the FTP session client.

FTP offers no recursive delete and NLST returns bare names without a
type, so each entry is first deleted as a file and treated as a
directory when the server refuses.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from ftpsession.ftp.exceptions import FTPDirectoryRemovalError

if TYPE_CHECKING:
    from ftpsession.ftp.session import FTPSession

logger = logging.getLogger("ftpsession.remover")

# Listing entries that never name a real child
SKIPPED_NAMES = frozenset({".", ".."})


class EntryKind(Enum):
    """Outcome of probing a listing entry with a file delete."""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass
class RemovalReport:
    """Counts of what a recursive delete removed."""
    path: str
    files_deleted: int = 0
    directories_removed: int = 0


def normalize_directory_path(path: str) -> str:
    """Return path with exactly one trailing '/'."""
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return f"{stripped}/"


def entry_path(directory: str, entry: str) -> str:
    """
    Build the full path of a listing entry.

    Args:
        directory: Normalized directory path (ends with '/')
        entry: Name as returned by NLST, bare or already a full path

    Returns:
        Full path of the entry
    """
    if entry.startswith("/") or (directory != "/" and entry.startswith(directory)):
        return entry
    return f"{directory}{entry}"


class DirectoryRemover:
    """Deletes a remote directory tree bottom-up."""

    def __init__(self, session: "FTPSession"):
        """
        Initialize the remover.

        Args:
            session: Session whose guarded operations are used
        """
        self._session = session
        self._report: Optional[RemovalReport] = None

    @property
    def last_report(self) -> Optional[RemovalReport]:
        """Report of the last completed removal."""
        return self._report

    def remove(self, path: str) -> RemovalReport:
        """
        Delete a directory and everything below it.

        Args:
            path: Remote directory path

        Returns:
            RemovalReport for the whole tree

        Raises:
            FTPNotConnectedError: If the session is not connected
            FTPDirectoryRemovalError: If a directory stays non-removable
        """
        report = RemovalReport(path=normalize_directory_path(path))
        self._remove_tree(report.path, report)
        self._report = report
        logger.info(
            f"Deleted {report.path}: {report.files_deleted} files, "
            f"{report.directories_removed} directories"
        )
        return report

    def _remove_tree(self, directory: str, report: RemovalReport) -> None:
        for entry in self._session.list(directory):
            full_path = entry_path(directory, entry)
            name = full_path.rstrip("/").rsplit("/", 1)[-1]

            # Guard against self-referential listings
            if name in SKIPPED_NAMES or full_path.rstrip("/") == directory.rstrip("/"):
                continue

            if self._session.probe_delete_file(full_path) == EntryKind.FILE:
                report.files_deleted += 1
                continue

            logger.debug(f"{full_path} is not a file, removing as directory")
            subdirectory = normalize_directory_path(full_path)
            try:
                self._remove_tree(subdirectory, report)
            except FTPDirectoryRemovalError as e:
                if e.path == subdirectory:
                    logger.warning(f"{full_path} is not removable as file or directory")
                raise

        self._session.remove_empty_directory(directory)
        report.directories_removed += 1
