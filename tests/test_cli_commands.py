"""Tests for CLI command handlers."""

from unittest.mock import Mock

from cli.commands import (
    dispatch_command,
    handle_delete,
    handle_download,
    handle_list,
    handle_login,
    handle_logout,
    handle_register,
    handle_revoke,
    handle_share,
    handle_transfer,
    handle_upload,
    handle_whoami,
)
from cli.models import (
    DeleteCommand,
    DownloadCommand,
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


def test_handle_register():
    mock_client = Mock(spec=ShareDriveClient)
    mock_client.register.return_value = "Registration successful!"

    result = handle_register(RegisterCommand(username='alice', password='pw'), client=mock_client)

    assert 'Registration successful' in result
    mock_client.register.assert_called_once_with('alice', 'pw')


def test_handle_login():
    mock_client = Mock(spec=ShareDriveClient)
    mock_client.login.return_value = "Login successful!"

    handle_login(LoginCommand(username='alice', password='pw'), client=mock_client)

    mock_client.login.assert_called_once_with('alice', 'pw')


def test_handle_upload():
    mock_client = Mock(spec=ShareDriveClient)
    mock_client.upload_files.return_value = "Uploaded: a.txt"

    result = handle_upload(UploadCommand(paths=('a.txt', 'b.txt')), client=mock_client)

    assert result == "Uploaded: a.txt"
    mock_client.upload_files.assert_called_once_with(['a.txt', 'b.txt'])


def test_handle_list():
    mock_client = Mock(spec=ShareDriveClient)
    handle_list(ListCommand(), client=mock_client)
    mock_client.list_files.assert_called_once_with()


def test_handle_download():
    mock_client = Mock(spec=ShareDriveClient)
    handle_download(DownloadCommand(file_id='report.pdf', output_path='x.pdf'), client=mock_client)
    mock_client.download.assert_called_once_with('report.pdf', 'x.pdf')


def test_handle_transfer():
    mock_client = Mock(spec=ShareDriveClient)
    handle_transfer(TransferCommand(file_id='report.pdf', new_owner='bob'), client=mock_client)
    mock_client.transfer.assert_called_once_with('report.pdf', 'bob')


def test_handle_share():
    mock_client = Mock(spec=ShareDriveClient)
    handle_share(ShareCommand(file_id='report.pdf', users=('bob', 'carol')), client=mock_client)
    mock_client.share.assert_called_once_with('report.pdf', ['bob', 'carol'])


def test_handle_revoke():
    mock_client = Mock(spec=ShareDriveClient)
    handle_revoke(RevokeCommand(file_id='report.pdf', users=('bob',)), client=mock_client)
    mock_client.revoke.assert_called_once_with('report.pdf', ['bob'])


def test_handle_delete():
    mock_client = Mock(spec=ShareDriveClient)
    handle_delete(DeleteCommand(file_id='report.pdf'), client=mock_client)
    mock_client.delete.assert_called_once_with('report.pdf')


def test_dispatch_routes_by_type():
    mock_client = Mock(spec=ShareDriveClient)
    mock_client.delete.return_value = "Deleted report.pdf."

    assert dispatch_command(DeleteCommand(file_id='report.pdf'), client=mock_client) == "Deleted report.pdf."


def test_dispatch_unknown_type():
    assert dispatch_command(object()).startswith("Unknown command type")


def test_handle_whoami():
    mock_client = Mock(spec=ShareDriveClient)
    mock_client.whoami.return_value = "Logged in as alice (User ID: u-alice)"

    assert handle_whoami(WhoAmICommand(), client=mock_client).startswith("Logged in as alice")
    mock_client.whoami.assert_called_once_with()


def test_handle_logout():
    mock_client = Mock(spec=ShareDriveClient)
    mock_client.logout.return_value = "Logged out. API key removed from config."

    assert handle_logout(LogoutCommand(), client=mock_client).startswith("Logged out")
    assert dispatch_command(LogoutCommand(), client=mock_client).startswith("Logged out")
    assert mock_client.logout.call_count == 2
