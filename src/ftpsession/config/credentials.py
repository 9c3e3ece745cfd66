"""Secure credential storage for the FTP session client.

Uses the system keyring (Windows Credential Manager, macOS Keychain,
Linux Secret Service) so FTP passwords never live in the settings file.
"""

import logging
from typing import Optional

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from ftpsession.ftp.connection import strip_scheme

logger = logging.getLogger("ftpsession.credentials")


class CredentialManager:
    """FTP password storage using system keyring."""

    SERVICE_NAME = "ftp-session"

    def __init__(self, service_name: str = SERVICE_NAME):
        self._service_name = service_name

    @staticmethod
    def make_key(host: str, username: str) -> str:
        """
        Build the keyring entry name for a server account.

        "ftp://Example.com" and "example.com" share one entry.
        """
        return f"{username}@{strip_scheme(host).strip().lower()}"

    def save_password(self, host: str, username: str, password: str) -> bool:
        """
        Save FTP password securely.

        Returns:
            True if saved successfully, False otherwise
        """
        try:
            keyring.set_password(self._service_name, self.make_key(host, username), password)
        except KeyringError as e:
            logger.warning(f"Could not store password for {username}@{host}: {e}")
            return False
        return True

    def get_password(self, host: str, username: str) -> Optional[str]:
        """
        Retrieve saved password.

        Returns:
            Password string or None if not found or keyring unavailable
        """
        try:
            return keyring.get_password(self._service_name, self.make_key(host, username))
        except KeyringError as e:
            logger.debug(f"Keyring lookup failed for {username}@{host}: {e}")
            return None

    def delete_password(self, host: str, username: str) -> bool:
        """
        Remove saved password.

        Returns:
            True if deleted, False if there was none or the keyring failed
        """
        try:
            keyring.delete_password(self._service_name, self.make_key(host, username))
        except PasswordDeleteError:
            return False
        except KeyringError as e:
            logger.warning(f"Could not delete password for {username}@{host}: {e}")
            return False
        return True
