"""FTP operations module for the FTP session client.

This module handles all FTP-related functionality:
- FTPSession: Session facade with chainable operations
- ConnectionGuard: Connection state tracking
- FTPTransport: Primitive FTP commands over ftplib
- DirectoryRemover: Recursive remote directory deletion
- Transfer modes: ASCII/binary resolution from file extensions
- Exceptions: FTP-specific error types
"""
