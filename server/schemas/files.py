"""Pydantic schemas for file operation endpoints."""

from typing import List
from pydantic import BaseModel, Field


class FileRecordResponse(BaseModel):
    """File record as seen by its owner or a grantee."""
    file_id: str
    name: str
    size: int
    type: str
    owner_id: str
    owner: str
    shared_to: List[str]
    created_at: str


class ListFilesResponse(BaseModel):
    """Response model for file listing."""
    files: List[FileRecordResponse]


class TransferRequest(BaseModel):
    """Request model for an ownership transfer."""
    new_owner: str = Field(..., min_length=1, description="Username of the new owner")


class ShareRequest(BaseModel):
    """Request model for replacing a file's share list."""
    users: List[str] = Field(default_factory=list, description="Usernames to grant access to")


class DeleteFileResponse(BaseModel):
    """Response model for file deletion."""
    file_id: str
    deleted: bool
