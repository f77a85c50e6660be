"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class RegisterCommand:
    """Register a new user account."""

    username: str
    password: str
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class LoginCommand:
    """Login with username and password."""

    username: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    """Revoke the stored API key."""

    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class WhoAmICommand:
    """Show the logged-in user."""

    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class UploadCommand:
    """Upload local files."""

    paths: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ListCommand:
    """List visible files."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class InfoCommand:
    """Show one file's metadata."""

    file_id: str
    command: Literal["info"] = "info"


@dataclass(frozen=True)
class DownloadCommand:
    """Download file by id."""

    file_id: str
    output_path: str | None = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class TransferCommand:
    """Hand ownership to another user."""

    file_id: str
    new_owner: str
    command: Literal["transfer"] = "transfer"


@dataclass(frozen=True)
class ShareCommand:
    """Replace the share list of a file."""

    file_id: str
    users: tuple[str, ...]
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class RevokeCommand:
    """Remove users from the share list of a file."""

    file_id: str
    users: tuple[str, ...]
    command: Literal["revoke"] = "revoke"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a file."""

    file_id: str
    command: Literal["delete"] = "delete"


CommandRequest = (
    RegisterCommand
    | LoginCommand
    | LogoutCommand
    | WhoAmICommand
    | UploadCommand
    | ListCommand
    | InfoCommand
    | DownloadCommand
    | TransferCommand
    | ShareCommand
    | RevokeCommand
    | DeleteCommand
)
