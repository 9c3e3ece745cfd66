"""FTP session client.

A stateful layer over ftplib that guards operations on the connection
state and adds recursive directory removal, extension-based transfer
mode selection and permission changes after upload or mkdir.
"""

__version__ = "1.0.0"
