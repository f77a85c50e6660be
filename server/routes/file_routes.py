"""File operation API routes."""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from server.auth import get_current_user
from server.authorization import Action
from server.config import MAX_UPLOAD_BYTES
from server.domain import FileRecord
from server.schemas.common import ErrorResponse
from server.schemas.files import (
    DeleteFileResponse,
    FileRecordResponse,
    ListFilesResponse,
    ShareRequest,
    TransferRequest,
)
from server.services.auth_service import AuthService
from server.services.file_service import FileService
from server.utils import parse_names

router = APIRouter(
    prefix="/files",
    tags=["Files"],
    responses={
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


def _to_responses(records: List[FileRecord], auth_service: AuthService) -> List[FileRecordResponse]:
    user_ids = set()
    for record in records:
        user_ids.add(record.owner_id)
        user_ids.update(record.shared_to)
    names = auth_service.usernames_for(user_ids)

    return [
        FileRecordResponse(
            file_id=record.file_id,
            name=record.name,
            size=record.size,
            type=record.type,
            owner_id=record.owner_id,
            owner=names.get(record.owner_id, record.owner_id),
            shared_to=sorted(names.get(uid, uid) for uid in record.shared_to),
            created_at=record.created_at.isoformat(),
        )
        for record in records
    ]


@router.post("", response_model=FileRecordResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: UploadFile = File(...),
    current_user: str = Depends(get_current_user)
):
    """
    Upload a file. The caller becomes its owner.

    Parameters:
        - file: File to upload (multipart/form-data); its name becomes the file id
        - Authorization header: Bearer <api_key> (required)

    Raises:
        - 400: No usable file name
        - 401: Invalid or missing API Key
        - 409: A file with this id already exists
        - 413: File too large
        - 503: Storage failure
    """
    file_content = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(file_content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {MAX_UPLOAD_BYTES} byte upload limit"
        )

    file_service = FileService()
    record = await run_in_threadpool(
        file_service.upload_file, file_content, file.filename or "", current_user
    )

    return _to_responses([record], AuthService())[0]


@router.get("", response_model=ListFilesResponse)
def list_files(current_user: str = Depends(get_current_user)):
    """
    List files the caller owns or has been granted access to.
    """
    records = FileService().list_files(current_user)
    return ListFilesResponse(files=_to_responses(records, AuthService()))


@router.get("/{file_id}", response_model=FileRecordResponse)
def get_file(file_id: str, current_user: str = Depends(get_current_user)):
    """
    Metadata of one file (owner or grantee only).
    """
    record = FileService().get_file(file_id, current_user)
    return _to_responses([record], AuthService())[0]


@router.get("/{file_id}/download")
def download_file(file_id: str, current_user: str = Depends(get_current_user)):
    """
    Download a file by file_id.

    Raises:
        - 401: Invalid or missing API Key
        - 403/404: File not found or not visible to the caller
    """
    record, stream = FileService().download_file(file_id, current_user)

    return StreamingResponse(
        stream,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": f'attachment; filename="{record.file_id}"',
            "Content-Length": str(record.size),
        }
    )


@router.post("/{file_id}/transfer", response_model=FileRecordResponse)
def transfer_file(
    file_id: str,
    request: TransferRequest,
    current_user: str = Depends(get_current_user)
):
    """
    Hand ownership of a file to another user (owner only).

    Raises:
        - 400: Unknown new owner
        - 403/404: File not found or caller is not the owner
    """
    file_service = FileService()
    file_service.check_access(file_id, current_user, Action.TRANSFER)

    auth_service = AuthService()
    new_owner_id = auth_service.resolve_usernames([request.new_owner])[0]
    record = file_service.transfer_ownership(file_id, current_user, new_owner_id)
    return _to_responses([record], auth_service)[0]


@router.put("/{file_id}/shares", response_model=FileRecordResponse)
def share_file(
    file_id: str,
    request: ShareRequest,
    current_user: str = Depends(get_current_user)
):
    """
    Replace the list of users a file is shared with (owner only).

    An empty list removes every grant.
    """
    file_service = FileService()
    file_service.check_access(file_id, current_user, Action.SHARE)

    auth_service = AuthService()
    target_ids = auth_service.resolve_usernames(request.users)
    record = file_service.share_file(file_id, current_user, target_ids)
    return _to_responses([record], auth_service)[0]


@router.delete("/{file_id}/shares", response_model=FileRecordResponse)
def revoke_access(
    file_id: str,
    users: str = Query(..., description="Comma-separated usernames to revoke"),
    current_user: str = Depends(get_current_user)
):
    """
    Remove users from a file's share list (owner only).

    Users that are not on the list are ignored.
    """
    file_service = FileService()
    file_service.check_access(file_id, current_user, Action.REVOKE)

    auth_service = AuthService()
    target_ids = auth_service.resolve_usernames(parse_names(users))
    record = file_service.revoke_access(file_id, current_user, target_ids)
    return _to_responses([record], auth_service)[0]


@router.delete("/{file_id}", response_model=DeleteFileResponse)
def delete_file(file_id: str, current_user: str = Depends(get_current_user)):
    """
    Delete a file and its content (owner only).
    """
    FileService().delete_file(file_id, current_user)
    return DeleteFileResponse(file_id=file_id, deleted=True)
