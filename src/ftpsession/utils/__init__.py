"""Utility module for the FTP session client.

This module provides cross-cutting utilities:
- Logging: Configured logging with credential redaction
- Validators: Input validation for host, port, paths and permissions
"""
