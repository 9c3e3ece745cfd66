"""FTP transport primitives for the FTP session client.

Thin layer over ftplib. Each primitive performs exactly one FTP command
and reports success or failure instead of raising, so the session layer
decides which failures are errors.
"""

import logging
import os
from ftplib import FTP, all_errors, error_perm
from pathlib import Path
from typing import List, Optional, Union

from ftpsession.ftp.modes import TransferMode

logger = logging.getLogger("ftpsession.transport")


class FTPTransport:
    """Primitive FTP operations on an ftplib connection handle."""

    # Block size for binary transfers (8KB)
    BLOCK_SIZE = 8192

    def __init__(self, debug_level: int = 0):
        """
        Initialize the transport.

        Args:
            debug_level: ftplib debug level for new connections
        """
        self._debug_level = debug_level
        # Most recent primitive failure, None after a success
        self.last_error: Optional[Exception] = None

    def _fail(self, operation: str, target: str, error: Exception) -> bool:
        """Record and log a failed primitive."""
        self.last_error = error
        logger.debug(f"FTP {operation} failed for {target}: {error}")
        return False

    def _succeed(self) -> bool:
        self.last_error = None
        return True

    def connect(self, host: str, port: int, timeout: float) -> Optional[FTP]:
        """
        Open a control connection.

        Args:
            host: Bare host name or address
            port: Control port
            timeout: Socket timeout in seconds

        Returns:
            Connected FTP handle, or None on failure
        """
        ftp = FTP()
        ftp.set_debuglevel(self._debug_level)
        try:
            ftp.connect(host=host, port=port, timeout=timeout)
        except all_errors as e:
            self._fail("connect", f"{host}:{port}", e)
            return None

        self.last_error = None
        logger.debug(f"Connected to {host}:{port}")
        return ftp

    def login(self, ftp: FTP, username: str, password: str) -> bool:
        try:
            ftp.login(user=username, passwd=password)
        except all_errors as e:
            return self._fail("login", username, e)
        return self._succeed()

    def set_passive(self, ftp: FTP, passive: bool) -> bool:
        try:
            ftp.set_pasv(passive)
        except all_errors as e:
            return self._fail("set passive", str(passive), e)
        return self._succeed()

    def change_dir(self, ftp: FTP, path: str) -> bool:
        try:
            ftp.cwd(path)
        except all_errors as e:
            return self._fail("cwd", path, e)
        return self._succeed()

    def make_dir(self, ftp: FTP, path: str) -> bool:
        try:
            ftp.mkd(path)
        except all_errors as e:
            return self._fail("mkd", path, e)
        return self._succeed()

    def put(
        self,
        ftp: FTP,
        remote_path: str,
        local_path: Union[str, Path],
        mode: TransferMode
    ) -> bool:
        """
        Upload a local file.

        ASCII mode sends lines with CRLF translation, binary mode sends
        the bytes unchanged.

        Returns:
            True if the server accepted the whole file
        """
        try:
            with open(local_path, "rb") as f:
                if mode == TransferMode.ASCII:
                    ftp.storlines(f"STOR {remote_path}", f)
                else:
                    ftp.storbinary(f"STOR {remote_path}", f, blocksize=self.BLOCK_SIZE)
        except all_errors as e:
            return self._fail("put", remote_path, e)
        return self._succeed()

    def get(
        self,
        ftp: FTP,
        local_path: Union[str, Path],
        remote_path: str,
        mode: TransferMode
    ) -> bool:
        """
        Download a remote file to a local path.

        ASCII mode writes lines with local line endings, binary mode
        writes the bytes unchanged. Data is received into a ".part" file
        beside the target, which replaces the target only once the whole
        file has arrived. A failed download leaves an existing local file
        untouched.

        Returns:
            True if the whole file was received
        """
        target = Path(local_path)
        partial = target.with_name(f"{target.name}.part")
        try:
            if mode == TransferMode.ASCII:
                with open(partial, "w", encoding=ftp.encoding) as f:
                    ftp.retrlines(f"RETR {remote_path}", lambda line: f.write(line + "\n"))
            else:
                with open(partial, "wb") as f:
                    ftp.retrbinary(f"RETR {remote_path}", f.write, blocksize=self.BLOCK_SIZE)
            os.replace(partial, target)
        except all_errors as e:
            partial.unlink(missing_ok=True)
            return self._fail("get", remote_path, e)
        return self._succeed()

    def rename(self, ftp: FTP, old_name: str, new_name: str) -> bool:
        try:
            ftp.rename(old_name, new_name)
        except all_errors as e:
            return self._fail("rename", f"{old_name} -> {new_name}", e)
        return self._succeed()

    def delete_file(self, ftp: FTP, path: str) -> bool:
        try:
            ftp.delete(path)
        except all_errors as e:
            return self._fail("dele", path, e)
        return self._succeed()

    def remove_dir(self, ftp: FTP, path: str) -> bool:
        try:
            ftp.rmd(path)
        except all_errors as e:
            return self._fail("rmd", path, e)
        return self._succeed()

    def chmod(self, ftp: FTP, permissions: int, path: str) -> bool:
        """Change permissions with SITE CHMOD, permissions given as an int (e.g. 0o755)."""
        try:
            ftp.sendcmd(f"SITE CHMOD {permissions:o} {path}")
        except all_errors as e:
            return self._fail("chmod", path, e)
        return self._succeed()

    def list_names(self, ftp: FTP, path: str) -> List[str]:
        """
        List entry names in a directory.

        Returns:
            Names as reported by the server, empty if the directory is
            empty or cannot be listed
        """
        try:
            names = ftp.nlst(path)
        except error_perm as e:
            # Some servers answer NLST on an empty directory with 550
            if str(e).startswith("550"):
                logger.debug(f"No entries in {path}: {e}")
                self.last_error = None
                return []
            self._fail("nlst", path, e)
            return []
        except all_errors as e:
            self._fail("nlst", path, e)
            return []

        self.last_error = None
        return names

    def close(self, ftp: FTP) -> bool:
        """Close the connection. Best effort, always reports success."""
        try:
            ftp.quit()
        except Exception:
            try:
                ftp.close()
            except Exception:
                pass
        return True
