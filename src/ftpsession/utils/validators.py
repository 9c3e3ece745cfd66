"""Input validators for the FTP session client.

Provides validation functions for user inputs like host names,
ports, timeouts, paths and permission modes.
"""

import re
from pathlib import Path
from typing import Optional, Tuple, Union


# IPv4 address pattern
IPV4_PATTERN = re.compile(
    r'^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'
    r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
)

# Hostname pattern (simplified)
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*$'
)

# Octal permission bits, e.g. 755 or 0755
PERMISSIONS_PATTERN = re.compile(r'^0?[0-7]{3,4}$')


def validate_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a host (IP address or hostname), with optional scheme prefix.

    Args:
        host: Host string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    host = host.strip()
    if "://" in host:
        host = host.split("://", 1)[1]

    if IPV4_PATTERN.match(host) or HOSTNAME_PATTERN.match(host):
        return True, None

    return False, f"Invalid host: {host}. Must be a valid IP address or hostname."


def validate_port(port: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a port number.

    Args:
        port: Port number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(port, int):
        try:
            port = int(port)
        except (ValueError, TypeError):
            return False, "Port must be a number"

    if port < 1 or port > 65535:
        return False, f"Port must be between 1 and 65535, got {port}"

    return True, None


def validate_timeout(timeout: int) -> Tuple[bool, Optional[str]]:
    """
    Validate a timeout value in seconds.

    Args:
        timeout: Timeout in seconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(timeout, int):
        try:
            timeout = int(timeout)
        except (ValueError, TypeError):
            return False, "Timeout must be a number"

    if timeout < 1 or timeout > 600:
        return False, f"Timeout must be between 1 and 600 seconds, got {timeout}"

    return True, None


def validate_file_path(path: Union[str, Path], must_exist: bool = True) -> Tuple[bool, Optional[str]]:
    """
    Validate a local file path.

    Args:
        path: Path to validate
        must_exist: If True, file must exist

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not path:
        return False, "File path is required"

    if isinstance(path, str):
        path = Path(path)

    if must_exist:
        if not path.exists():
            return False, f"File does not exist: {path}"
        if not path.is_file():
            return False, f"Path is not a file: {path}"

    return True, None


def parse_permissions(value: str) -> Tuple[Optional[int], Optional[str]]:
    """
    Parse an octal permission string such as "755".

    Args:
        value: Octal digits, optionally with a leading 0 or 0o

    Returns:
        Tuple of (permission bits, error_message)
    """
    if value is None:
        return None, "Permissions are required"

    text = str(value).strip().lower()
    if text.startswith("0o"):
        text = text[2:]

    if not PERMISSIONS_PATTERN.match(text):
        return None, f"Invalid permissions: {value}. Use octal digits like 755"

    return int(text, 8), None
