"""Unit tests for the command-line entry point."""

import pytest
from unittest.mock import MagicMock, Mock, patch

from ftpsession.config.credentials import CredentialManager
from ftpsession.config.settings import AppSettings, SettingsManager
from ftpsession.ftp.exceptions import FTPAuthenticationError
from ftpsession.ftp.modes import TransferMode
from ftpsession.ftp.session import FTPSession
from ftpsession.main import build_config, build_parser, main

from tests.conftest import FakeTransport, TEST_FTP_PASS, TEST_FTP_USER


@pytest.fixture
def settings_manager(tmp_path):
    manager = SettingsManager(config_path=tmp_path / "settings.json")
    manager.save(AppSettings(log_to_file=False))
    return manager


@pytest.fixture
def credentials():
    manager = Mock(spec=CredentialManager)
    manager.get_password.return_value = None
    manager.save_password.return_value = True
    return manager


@pytest.fixture
def server():
    return FakeTransport(
        files={"/pub/readme.txt": b"hello\n"},
        dirs={"/pub", "/pub/old", "/pub/old/deep"},
    )


@pytest.fixture
def run(settings_manager, credentials, server):
    """Run the CLI against the fake server."""
    def factory(config, password):
        return FTPSession.from_config(config, password, transport=server)

    def _run(*argv):
        with patch("ftpsession.main.setup_logging"):
            return main(
                ["--host", "ftp.example.com", "-u", TEST_FTP_USER, "-p", TEST_FTP_PASS, *argv],
                settings_manager=settings_manager,
                credentials=credentials,
                session_factory=factory,
            )

    return _run


class TestParser:
    """Tests for argument parsing."""

    def test_put_mode_flags(self):
        args = build_parser().parse_args(["put", "a.txt", "/a.txt", "--binary", "--chmod", "644"])
        assert args.mode == TransferMode.BINARY
        assert args.chmod == 0o644

    def test_put_default_mode_is_unspecified(self):
        args = build_parser().parse_args(["put", "a.txt", "/a.txt"])
        assert args.mode is None
        assert args.chmod is None

    def test_invalid_permissions(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["chmod", "rwx", "/a"])
        assert "Invalid permissions" in capsys.readouterr().err

    def test_build_config_falls_back_to_settings(self):
        args = build_parser().parse_args(["ls"])
        settings = AppSettings(last_host="saved.example.com", last_port=2121, passive_mode=False)

        config = build_config(args, settings)

        assert config.host == "saved.example.com"
        assert config.port == 2121
        assert config.passive_mode is False

    def test_build_config_options_win(self):
        args = build_parser().parse_args(["--host", "other.example.com", "--passive", "--timeout", "10", "ls"])
        settings = AppSettings(last_host="saved.example.com", passive_mode=False)

        config = build_config(args, settings)

        assert config.host == "other.example.com"
        assert config.passive_mode is True
        assert config.timeout == 10

    def test_build_config_without_host(self):
        args = build_parser().parse_args(["ls"])
        with pytest.raises(ValueError, match="Host is required"):
            build_config(args, AppSettings())


class TestCommands:
    """Tests for running subcommands."""

    def test_ls(self, run, capsys):
        assert run("ls", "/pub") == 0
        assert capsys.readouterr().out.splitlines() == ["old", "readme.txt"]

    def test_mkdir_with_chmod(self, run, server):
        assert run("mkdir", "/pub/new", "--chmod", "750") == 0
        assert "/pub/new" in server.dirs
        assert server.permissions["/pub/new"] == 0o750

    def test_put_and_get(self, run, server, sample_text_file, tmp_path):
        assert run("put", str(sample_text_file), "/pub/index.html") == 0
        assert server.files["/pub/index.html"] == sample_text_file.read_bytes()
        assert server.primitive_calls("put")[0][3] == TransferMode.ASCII

        target = tmp_path / "copy.html"
        assert run("get", "/pub/index.html", str(target), "--binary") == 0
        assert target.read_bytes() == sample_text_file.read_bytes()

    def test_mv_and_rm(self, run, server):
        assert run("mv", "/pub/readme.txt", "/pub/README") == 0
        assert "/pub/README" in server.files

        assert run("rm", "/pub/README") == 0
        assert "/pub/README" not in server.files

    def test_rmdir_is_recursive(self, run, server, capsys):
        assert run("rmdir", "/pub/old") == 0
        assert server.dirs == {"/", "/pub"}
        assert "2 directories" in capsys.readouterr().out

    def test_chmod(self, run, server):
        assert run("chmod", "600", "/pub/readme.txt") == 0
        assert server.permissions["/pub/readme.txt"] == 0o600

    def test_failure_exit_status(self, run, capsys):
        assert run("rm", "/pub/missing") == 1
        assert "Failed to delete '/pub/missing'" in capsys.readouterr().err

    def test_put_missing_local_file_does_not_connect(self, run, server, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run("put", str(tmp_path / "missing.txt"), "/pub/missing.txt")

        assert exc_info.value.code == 2
        assert "File does not exist" in capsys.readouterr().err
        assert server.calls == []

    def test_put_directory_is_rejected(self, run, server, tmp_path):
        with pytest.raises(SystemExit):
            run("put", str(tmp_path), "/pub/dir")
        assert server.calls == []

    def test_forget_password(self, run, credentials):
        run("--forget-password", "ls")
        credentials.delete_password.assert_called_once_with("ftp.example.com", TEST_FTP_USER)

    def test_stored_password_kept_by_default(self, run, credentials):
        run("ls")
        credentials.delete_password.assert_not_called()

    def test_session_closed_after_command(self, run, server):
        run("ls")
        assert server.calls[-1] == ("close",)

    def test_settings_updated_after_connect(self, run, settings_manager):
        run("ls")
        settings = SettingsManager(config_path=settings_manager.config_path).load()
        assert settings.last_host == "ftp.example.com"
        assert settings.last_username == TEST_FTP_USER

    def test_save_password(self, run, credentials):
        run("--save-password", "ls")
        credentials.save_password.assert_called_once_with("ftp.example.com", TEST_FTP_USER, TEST_FTP_PASS)


class TestPasswordResolution:
    """Tests for password lookup order."""

    def _main(self, argv, settings_manager, credentials, factory):
        with patch("ftpsession.main.setup_logging"):
            return main(argv, settings_manager=settings_manager, credentials=credentials, session_factory=factory)

    def test_keyring_password_used(self, settings_manager, credentials):
        credentials.get_password.return_value = "from-keyring"
        factory = MagicMock()

        self._main(["--host", "h.example.com", "-u", "bob", "ls"], settings_manager, credentials, factory)

        assert factory.call_args[0][1] == "from-keyring"

    def test_prompt_when_no_saved_password(self, settings_manager, credentials):
        factory = MagicMock()

        with patch("ftpsession.main.getpass.getpass", return_value="typed") as mock_prompt:
            self._main(["--host", "h.example.com", "-u", "bob", "ls"], settings_manager, credentials, factory)

        mock_prompt.assert_called_once()
        assert factory.call_args[0][1] == "typed"

    def test_anonymous_does_not_prompt(self, settings_manager, credentials):
        factory = MagicMock()

        with patch("ftpsession.main.getpass.getpass") as mock_prompt:
            self._main(["--host", "h.example.com", "ls"], settings_manager, credentials, factory)

        mock_prompt.assert_not_called()
        assert factory.call_args[0][1] == ""

    def test_login_failure_exit_status(self, settings_manager, credentials, capsys):
        factory = Mock(side_effect=FTPAuthenticationError("bob"))

        status = self._main(["--host", "h.example.com", "-u", "bob", "-p", "x", "ls"], settings_manager, credentials, factory)

        assert status == 1
        assert "Authentication failed" in capsys.readouterr().err
