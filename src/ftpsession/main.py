"""Command-line entry point for the FTP session client.

Loads saved settings, resolves credentials, opens a session and runs a
single command against the server.
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from ftpsession import __version__
from ftpsession.config.credentials import CredentialManager
from ftpsession.config.paths import get_log_file_path
from ftpsession.config.settings import AppSettings, SettingsManager
from ftpsession.ftp.connection import FTPConnectionConfig, strip_scheme
from ftpsession.ftp.exceptions import FTPError
from ftpsession.ftp.modes import TransferMode
from ftpsession.ftp.session import FTPSession
from ftpsession.utils.logging import setup_logging
from ftpsession.utils.validators import (
    parse_permissions,
    validate_file_path,
    validate_host,
    validate_port,
    validate_timeout,
)

logger = logging.getLogger("ftpsession.cli")

SessionFactory = Callable[[FTPConnectionConfig, str], FTPSession]


def _permissions(value: str) -> int:
    """argparse type for octal permission strings."""
    permissions, error = parse_permissions(value)
    if error:
        raise argparse.ArgumentTypeError(error)
    return permissions


def _add_mode_options(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--ascii", dest="mode", action="store_const", const=TransferMode.ASCII,
        help="force ASCII transfer mode"
    )
    group.add_argument(
        "--binary", dest="mode", action="store_const", const=TransferMode.BINARY,
        help="force binary transfer mode"
    )
    parser.set_defaults(mode=None)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="ftpsession",
        description="Run a single command against an FTP server"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--host", help="FTP server (defaults to the last host used)")
    parser.add_argument("--port", type=int, help="control port")
    parser.add_argument("-u", "--user", help="user name")
    parser.add_argument("-p", "--password", help="password (defaults to keyring, then prompt)")
    parser.add_argument(
        "--save-password", action="store_true",
        help="store the password in the system keyring after login"
    )
    parser.add_argument(
        "--forget-password", action="store_true",
        help="remove the stored keyring password before connecting"
    )
    data_mode = parser.add_mutually_exclusive_group()
    data_mode.add_argument(
        "--passive", dest="passive", action="store_const", const=True,
        help="use passive mode data connections"
    )
    data_mode.add_argument(
        "--active", dest="passive", action="store_const", const=False,
        help="use active mode data connections"
    )
    parser.add_argument("--timeout", type=int, help="connect timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="log to the console")

    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="list a remote directory")
    ls.add_argument("path", nargs="?", default=".")

    mkdir = sub.add_parser("mkdir", help="create a remote directory")
    mkdir.add_argument("path")
    mkdir.add_argument("--chmod", type=_permissions, help="permissions, e.g. 755")

    put = sub.add_parser("put", help="upload a file")
    put.add_argument("local", type=Path)
    put.add_argument("remote")
    put.add_argument("--chmod", type=_permissions, help="permissions, e.g. 644")
    _add_mode_options(put)

    get = sub.add_parser("get", help="download a file")
    get.add_argument("remote")
    get.add_argument("local", type=Path)
    _add_mode_options(get)

    mv = sub.add_parser("mv", help="rename a remote file or directory")
    mv.add_argument("old")
    mv.add_argument("new")

    rm = sub.add_parser("rm", help="delete a remote file")
    rm.add_argument("path")

    rmdir = sub.add_parser("rmdir", help="delete a remote directory and its contents")
    rmdir.add_argument("path")

    chmod = sub.add_parser("chmod", help="change remote permissions")
    chmod.add_argument("permissions", type=_permissions)
    chmod.add_argument("path")

    return parser


def build_config(args: argparse.Namespace, settings: AppSettings) -> FTPConnectionConfig:
    """
    Merge command-line options over saved settings.

    Raises:
        ValueError: If the resulting host, port or timeout is invalid
    """
    host = args.host or settings.last_host
    port = args.port if args.port is not None else settings.last_port
    timeout = args.timeout if args.timeout is not None else settings.timeout

    for is_valid, error in (validate_host(host), validate_port(port), validate_timeout(timeout)):
        if not is_valid:
            raise ValueError(error)

    return FTPConnectionConfig(
        host=host,
        port=port,
        username=args.user or settings.last_username,
        passive_mode=settings.passive_mode if args.passive is None else args.passive,
        timeout=timeout,
    )


def resolve_password(
    args: argparse.Namespace,
    config: FTPConnectionConfig,
    credentials: CredentialManager
) -> str:
    """Password from the command line, then the keyring, then a prompt."""
    if args.password is not None:
        return args.password

    saved = credentials.get_password(config.host, config.username)
    if saved is not None:
        return saved

    if config.username == "anonymous":
        return ""

    return getpass.getpass(f"Password for {config.username}@{strip_scheme(config.host)}: ")


def run_command(session: FTPSession, args: argparse.Namespace) -> None:
    """Run the selected subcommand on a ready session."""
    command = args.command

    if command == "ls":
        for name in session.list(args.path):
            print(name)
    elif command == "mkdir":
        session.mkdir(args.path, args.chmod)
    elif command == "put":
        session.upload(args.local, args.remote, args.mode, args.chmod)
    elif command == "get":
        session.download(args.remote, args.local, args.mode)
    elif command == "mv":
        session.rename(args.old, args.new)
    elif command == "rm":
        session.delete_file(args.path)
    elif command == "rmdir":
        session.delete_directory(args.path)
        report = session.last_removal
        print(
            f"Removed {report.path}: {report.files_deleted} files, "
            f"{report.directories_removed} directories"
        )
    elif command == "chmod":
        session.chmod(args.path, args.permissions)
    else:
        raise ValueError(f"Unknown command: {command}")


def main(
    argv: Optional[List[str]] = None,
    settings_manager: Optional[SettingsManager] = None,
    credentials: Optional[CredentialManager] = None,
    session_factory: Optional[SessionFactory] = None
) -> int:
    """
    Run the command line client.

    Args:
        argv: Arguments, defaults to sys.argv[1:]
        settings_manager: Settings store, defaults to the platform location
        credentials: Password store, defaults to the system keyring
        session_factory: Opens a ready session from config and password

    Returns:
        Process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings_manager = settings_manager or SettingsManager()
    credentials = credentials or CredentialManager()
    session_factory = session_factory or FTPSession.from_config
    settings = settings_manager.load()

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    setup_logging(
        level=level,
        log_file=get_log_file_path() if settings.log_to_file else None,
        console=args.verbose
    )

    try:
        config = build_config(args, settings)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "put":
        is_valid, error = validate_file_path(args.local)
        if not is_valid:
            parser.error(error)

    if args.forget_password and credentials.delete_password(config.host, config.username):
        logger.info(f"Removed stored password for {config.username}@{config.host}")

    password = resolve_password(args, config, credentials)

    try:
        with session_factory(config, password) as session:
            settings_manager.update(
                last_host=config.host,
                last_port=config.port,
                last_username=config.username,
                passive_mode=config.passive_mode,
                timeout=config.timeout,
            )
            if args.save_password:
                credentials.save_password(config.host, config.username, password)
            run_command(session, args)
    except FTPError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"ftpsession: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
