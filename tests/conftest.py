"""Pytest configuration and shared fixtures for FTP session client tests."""

import pytest
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from ftpsession.ftp.session import FTPSession


# Test constants
TEST_FTP_HOST = "127.0.0.1"
TEST_FTP_PORT = 2121
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


def _parent(path: str) -> str:
    parent = path.rsplit("/", 1)[0]
    return parent or "/"


def _clean(path: str) -> str:
    return path.rstrip("/") or "/"


class FakeTransport:
    """
    In-memory FTP server implementing the transport primitives.

    Every call is recorded in `calls` as (primitive, *arguments) without
    the connection handle. Files and directories are absolute paths.
    """

    def __init__(
        self,
        files: Optional[Dict[str, bytes]] = None,
        dirs: Optional[Set[str]] = None,
        username: str = TEST_FTP_USER,
        password: str = TEST_FTP_PASS
    ):
        self.files: Dict[str, bytes] = dict(files or {})
        self.dirs: Set[str] = {"/"} | set(dirs or ())
        self.permissions: Dict[str, int] = {}
        self.username = username
        self.password = password
        self.calls: List[Tuple] = []
        self.failing: Set[Tuple[str, str]] = set()
        self.extra_entries: Dict[str, List[str]] = {}
        self.passive: Optional[bool] = None
        self.last_error: Optional[Exception] = None
        self.handle = object()

    def fail(self, primitive: str, path: str) -> None:
        """Make a primitive fail for a path."""
        self.failing.add((primitive, path))

    def _result(self, primitive: str, path: str, ok: bool) -> bool:
        if (primitive, path) in self.failing:
            ok = False
        self.last_error = None if ok else Exception(f"550 {primitive} {path}")
        return ok

    def primitive_calls(self, name: str) -> List[Tuple]:
        return [c for c in self.calls if c[0] == name]

    def children(self, directory: str) -> List[str]:
        directory = _clean(directory)
        entries = [p for p in self.files if _parent(p) == directory]
        entries += [d for d in self.dirs if d != "/" and _parent(d) == directory]
        return sorted(entries)

    def connect(self, host, port, timeout):
        self.calls.append(("connect", host, port, timeout))
        if ("connect", host) in self.failing:
            self.last_error = OSError("Connection refused")
            return None
        self.last_error = None
        return self.handle

    def login(self, ftp, username, password):
        self.calls.append(("login", username, password))
        return self._result("login", username, (username, password) == (self.username, self.password))

    def set_passive(self, ftp, passive):
        self.calls.append(("set_passive", passive))
        self.passive = passive
        return self._result("set_passive", str(passive), True)

    def change_dir(self, ftp, path):
        self.calls.append(("change_dir", path))
        return self._result("change_dir", path, _clean(path) in self.dirs)

    def make_dir(self, ftp, path):
        self.calls.append(("make_dir", path))
        path = _clean(path)
        ok = path not in self.dirs and path not in self.files and _parent(path) in self.dirs
        ok = self._result("make_dir", path, ok)
        if ok:
            self.dirs.add(path)
        return ok

    def put(self, ftp, remote_path, local_path, mode):
        self.calls.append(("put", remote_path, str(local_path), mode))
        ok = self._result("put", remote_path, _parent(remote_path) in self.dirs)
        if ok:
            self.files[remote_path] = Path(local_path).read_bytes()
        return ok

    def get(self, ftp, local_path, remote_path, mode):
        self.calls.append(("get", str(local_path), remote_path, mode))
        ok = self._result("get", remote_path, remote_path in self.files)
        if ok:
            Path(local_path).write_bytes(self.files[remote_path])
        return ok

    def rename(self, ftp, old_name, new_name):
        self.calls.append(("rename", old_name, new_name))
        ok = self._result("rename", old_name, old_name in self.files)
        if ok:
            self.files[new_name] = self.files.pop(old_name)
        return ok

    def delete_file(self, ftp, path):
        self.calls.append(("delete_file", path))
        ok = self._result("delete_file", path, path in self.files)
        if ok:
            del self.files[path]
        return ok

    def remove_dir(self, ftp, path):
        self.calls.append(("remove_dir", path))
        clean = _clean(path)
        ok = clean in self.dirs and clean != "/" and not self.children(clean)
        ok = self._result("remove_dir", path, ok)
        if ok:
            self.dirs.discard(clean)
        return ok

    def chmod(self, ftp, permissions, path):
        self.calls.append(("chmod", permissions, path))
        ok = self._result("chmod", path, path in self.files or _clean(path) in self.dirs)
        if ok:
            self.permissions[path] = permissions
        return ok

    def list_names(self, ftp, path):
        self.calls.append(("list_names", path))
        clean = _clean(path)
        if clean not in self.dirs:
            return []
        names = [p.rsplit("/", 1)[-1] for p in self.children(clean)]
        return self.extra_entries.get(clean, []) + names

    def close(self, ftp):
        self.calls.append(("close",))
        return True


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Provide an empty in-memory FTP server."""
    return FakeTransport()


@pytest.fixture
def ready_session(fake_transport: FakeTransport) -> FTPSession:
    """Provide a session in READY state on the fake transport."""
    session = FTPSession.create_connection(
        TEST_FTP_USER,
        TEST_FTP_PASS,
        TEST_FTP_HOST,
        port=TEST_FTP_PORT,
        transport=fake_transport,
    )
    fake_transport.calls.clear()
    return session


@pytest.fixture
def sample_text_file(tmp_path: Path) -> Path:
    """Create a small text file for upload tests."""
    text_file = tmp_path / "index.html"
    text_file.write_text("<html>\n<body>test</body>\n</html>\n")
    return text_file


@pytest.fixture
def sample_binary_file(tmp_path: Path) -> Path:
    """Create a small binary file for upload tests."""
    binary_file = tmp_path / "archive.tar.gz"
    binary_file.write_bytes(b"\x1f\x8b\x08\x00" + bytes(range(256)))
    return binary_file
