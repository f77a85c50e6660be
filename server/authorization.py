"""Access decisions for file actions.

Pure functions over a FileRecord and a principal id: no I/O, no errors.
Callers turn a DENY into the appropriate exception.
"""

from enum import Enum
from typing import Optional

from server.domain import FileRecord


class Action(str, Enum):
    VIEW = "view"
    DOWNLOAD = "download"
    TRANSFER = "transfer"
    SHARE = "share"
    REVOKE = "revoke"
    DELETE = "delete"
    UPLOAD = "upload"


class Verdict(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


READ_ACTIONS = frozenset({Action.VIEW, Action.DOWNLOAD})
OWNER_ACTIONS = frozenset({Action.TRANSFER, Action.SHARE, Action.REVOKE, Action.DELETE})


def decide(action: Action, record: Optional[FileRecord], principal_id: Optional[str]) -> Verdict:
    """
    Decide whether principal_id may perform action on record.

    Args:
        action: Action being attempted
        record: Target record (ignored for UPLOAD, which creates one)
        principal_id: Resolved principal, or None for anonymous callers

    Returns:
        Verdict.ALLOW or Verdict.DENY
    """
    if not principal_id:
        return Verdict.DENY

    if action == Action.UPLOAD:
        return Verdict.ALLOW

    if record is None:
        return Verdict.DENY

    is_owner = principal_id == record.owner_id

    if action in OWNER_ACTIONS:
        return Verdict.ALLOW if is_owner else Verdict.DENY

    if action in READ_ACTIONS:
        if is_owner or principal_id in record.shared_to:
            return Verdict.ALLOW
        return Verdict.DENY

    return Verdict.DENY


def is_allowed(action: Action, record: Optional[FileRecord], principal_id: Optional[str]) -> bool:
    return decide(action, record, principal_id) == Verdict.ALLOW
