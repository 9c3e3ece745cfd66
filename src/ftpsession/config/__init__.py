"""Configuration module for the FTP session client.

This module handles application settings and credentials:
- SettingsManager: JSON-based settings persistence
- CredentialManager: Secure credential storage via keyring
- Paths: Application data, settings and log locations
- AppSettings: Settings dataclass
"""
