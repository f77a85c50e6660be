"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    DeleteCommand,
    DownloadCommand,
    InfoCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    RegisterCommand,
    RevokeCommand,
    ShareCommand,
    TransferCommand,
    UploadCommand,
    WhoAmICommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name == "register":
        return _parse_credentials(args, RegisterCommand, "register")
    elif command_name == "login":
        return _parse_credentials(args, LoginCommand, "login")
    elif command_name == "logout":
        if args:
            raise ParseError("logout takes no arguments")
        return LogoutCommand()
    elif command_name == "whoami":
        if args:
            raise ParseError("whoami takes no arguments")
        return WhoAmICommand()
    elif command_name == "upload":
        return _parse_upload(args)
    elif command_name == "list":
        return _parse_list(args)
    elif command_name == "info":
        return InfoCommand(file_id=_single_file_id(args, "info"))
    elif command_name == "download":
        return _parse_download(args)
    elif command_name == "transfer":
        return _parse_transfer(args)
    elif command_name == "share":
        return _parse_share(args)
    elif command_name == "revoke":
        return _parse_revoke(args)
    elif command_name == "delete":
        return DeleteCommand(file_id=_single_file_id(args, "delete"))
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_credentials(args: list[str], command_type, name: str):
    """Parse '<command> <username> <password>'."""
    if len(args) != 2:
        raise ParseError(f"{name} requires exactly 2 arguments: <username> <password>")

    username, password = args
    return command_type(username=username, password=password)


def _parse_upload(args: list[str]) -> UploadCommand:
    if not args:
        raise ParseError("upload requires at least one file path")
    return UploadCommand(paths=tuple(args))


def _parse_list(args: list[str]) -> ListCommand:
    if args:
        raise ParseError("list takes no arguments")
    return ListCommand()


def _single_file_id(args: list[str], name: str) -> str:
    if len(args) != 1:
        raise ParseError(f"{name} requires exactly 1 argument: <file_id>")
    return args[0]


def _parse_download(args: list[str]) -> DownloadCommand:
    """Parse 'download <file_id> [output_path]' command."""
    if not args or len(args) > 2:
        raise ParseError("download requires 1 or 2 arguments: <file_id> [output_path]")

    output_path = args[1] if len(args) > 1 else None
    return DownloadCommand(file_id=args[0], output_path=output_path)


def _parse_transfer(args: list[str]) -> TransferCommand:
    if len(args) != 2:
        raise ParseError("transfer requires exactly 2 arguments: <file_id> <username>")

    file_id, new_owner = args
    return TransferCommand(file_id=file_id, new_owner=new_owner)


def _parse_share(args: list[str]) -> ShareCommand:
    """Parse 'share <file_id> [<username> ...]'; no users clears the list."""
    if not args:
        raise ParseError("share requires a file id: <file_id> [<username> ...]")

    return ShareCommand(file_id=args[0], users=tuple(args[1:]))


def _parse_revoke(args: list[str]) -> RevokeCommand:
    if len(args) < 2:
        raise ParseError("revoke requires a file id and at least one username")

    return RevokeCommand(file_id=args[0], users=tuple(args[1:]))
