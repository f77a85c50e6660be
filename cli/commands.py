"""Command handler functions for CLI operations."""

from typing import Optional

from common.logging_config import get_logger
from cli.config import Config
from cli.models import (
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
from cli.sharedrive_client import ShareDriveClient

logger = get_logger(__name__)


_client: Optional[ShareDriveClient] = None


def get_client() -> ShareDriveClient:
    """
    Get or create global ShareDriveClient instance.
    """
    global _client
    if _client is None:
        logger.debug("Creating new ShareDriveClient instance")
        _client = ShareDriveClient(Config())
    return _client


def handle_register(cmd: RegisterCommand, client: Optional[ShareDriveClient] = None) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with username and password
        client: Optional ShareDriveClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.register(cmd.username, cmd.password)


def handle_login(cmd: LoginCommand, client: Optional[ShareDriveClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.login(cmd.username, cmd.password)


def handle_logout(cmd: LogoutCommand, client: Optional[ShareDriveClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.logout()


def handle_whoami(cmd: WhoAmICommand, client: Optional[ShareDriveClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.whoami()


def handle_upload(cmd: UploadCommand, client: Optional[ShareDriveClient] = None) -> str:
    """
    Handle 'upload' command.

    Returns:
        One result line per uploaded path
    """
    logger.info(f"Executing upload command: {len(cmd.paths)} files")
    if client is None:
        client = get_client()
    return client.upload_files(list(cmd.paths))


def handle_list(cmd: ListCommand, client: Optional[ShareDriveClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_files()


def handle_info(cmd: InfoCommand, client: Optional[ShareDriveClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.file_info(cmd.file_id)


def handle_download(cmd: DownloadCommand, client: Optional[ShareDriveClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id and optional output_path
        client: Optional ShareDriveClient for dependency injection (testing)
    """
    logger.info(f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    return client.download(cmd.file_id, cmd.output_path)


def handle_transfer(cmd: TransferCommand, client: Optional[ShareDriveClient] = None) -> str:
    logger.info(f"Executing transfer command: file_id={cmd.file_id} new_owner={cmd.new_owner}")
    if client is None:
        client = get_client()
    return client.transfer(cmd.file_id, cmd.new_owner)


def handle_share(cmd: ShareCommand, client: Optional[ShareDriveClient] = None) -> str:
    """
    Handle 'share' command. The given users replace the current share list.
    """
    if client is None:
        client = get_client()
    return client.share(cmd.file_id, list(cmd.users))


def handle_revoke(cmd: RevokeCommand, client: Optional[ShareDriveClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.revoke(cmd.file_id, list(cmd.users))


def handle_delete(cmd: DeleteCommand, client: Optional[ShareDriveClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.delete(cmd.file_id)


HANDLERS = {
    RegisterCommand: handle_register,
    LoginCommand: handle_login,
    LogoutCommand: handle_logout,
    WhoAmICommand: handle_whoami,
    UploadCommand: handle_upload,
    ListCommand: handle_list,
    InfoCommand: handle_info,
    DownloadCommand: handle_download,
    TransferCommand: handle_transfer,
    ShareCommand: handle_share,
    RevokeCommand: handle_revoke,
    DeleteCommand: handle_delete,
}


def dispatch_command(cmd_obj, client: Optional[ShareDriveClient] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, client)
