"""Domain types for file ownership and sharing."""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import PurePosixPath, PureWindowsPath
from typing import FrozenSet, Iterable

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class FileRecord:
    """
    Ownership and sharing record for one stored file.

    size, type, name and created_at are fixed at upload; only owner_id and
    shared_to change afterwards, and only through the file service.
    """
    file_id: str
    owner_id: str
    size: int
    type: str
    name: str
    created_at: datetime
    shared_to: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.owner_id:
            raise ValueError(f"File {self.file_id} must have an owner")
        object.__setattr__(self, "shared_to", frozenset(self.shared_to))

    def with_owner(self, owner_id: str) -> "FileRecord":
        return replace(self, owner_id=owner_id)

    def with_shares(self, principal_ids: Iterable[str]) -> "FileRecord":
        return replace(self, shared_to=frozenset(principal_ids))


def derive_file_id(suggested_name: str) -> str:
    """
    Derive a file id from an uploaded file name.

    Keeps only the final path component (either separator style) and
    replaces characters outside [A-Za-z0-9._-] with '_'. Leading dots and dashes are
    stripped so ids never name hidden files.

    Returns:
        The file id, or an empty string if nothing usable remains
    """
    base = PureWindowsPath(PurePosixPath(suggested_name or "").name).name
    return _UNSAFE_CHARS.sub("_", base.strip()).lstrip(".-")


def extension_of(suggested_name: str) -> str:
    """
    Lower-cased extension without the dot ('report.PDF' -> 'pdf').
    """
    suffix = PurePosixPath(derive_file_id(suggested_name)).suffix
    return suffix[1:].lower() if suffix else ""
