"""Transfer mode resolution for the FTP session client.

Infers ASCII or binary transfer mode from a file extension when the
caller does not ask for one explicitly.
"""

import re
from enum import Enum
from typing import FrozenSet, Optional


class TransferMode(Enum):
    """FTP data transfer type."""
    ASCII = "ascii"
    BINARY = "binary"


# Extensions transferred in ASCII mode, everything else goes binary
TEXT_EXTENSIONS: FrozenSet[str] = frozenset({
    "txt",
    "text",
    "php",
    "phps",
    "php4",
    "js",
    "css",
    "htm",
    "html",
    "phtml",
    "shtml",
    "log",
    "xml",
})

# Files without any dot are treated as text
DEFAULT_EXTENSION = "txt"

_PATH_SEPARATORS = re.compile(r"[\\/]")


def get_file_extension(filename: str) -> str:
    """
    Extract the extension of a file name.

    Only the last path component is inspected, so a dot in a parent
    directory name does not count: "/site.d/README" has no extension
    and falls back to "txt", where a search over the whole path would
    return "d/README".

    Args:
        filename: Local or remote file path

    Returns:
        Text after the last '.', or 'txt' if the name has no '.'
    """
    name = _PATH_SEPARATORS.split(filename)[-1]
    if "." not in name:
        return DEFAULT_EXTENSION
    return name.rsplit(".", 1)[-1]


def get_transfer_mode_for_extension(
    extension: str,
    text_extensions: FrozenSet[str] = TEXT_EXTENSIONS
) -> TransferMode:
    """Map an extension to ASCII if it is a known text type, else binary."""
    if extension in text_extensions:
        return TransferMode.ASCII
    return TransferMode.BINARY


def resolve_transfer_mode(
    filename: str,
    mode: Optional[TransferMode] = None,
    text_extensions: FrozenSet[str] = TEXT_EXTENSIONS
) -> TransferMode:
    """
    Resolve the transfer mode for a file.

    Args:
        filename: File name used to infer the mode
        mode: Explicit mode; returned unchanged when given
        text_extensions: Extensions treated as text

    Returns:
        The explicit mode, or the mode inferred from the extension
    """
    if mode is not None:
        return mode
    return get_transfer_mode_for_extension(get_file_extension(filename), text_extensions)
