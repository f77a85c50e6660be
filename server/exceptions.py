"""Custom exception classes for the ShareDrive server."""


class ShareDriveException(Exception):
    """
    Base exception class for all ShareDrive errors.
    """
    pass


class UserAlreadyExistsError(ShareDriveException):
    """
    Raised when attempting to register a username that already exists.
    """
    pass


class InvalidCredentialsError(ShareDriveException):
    """
    Raised when login credentials are invalid.
    """
    pass


class InvalidAPIKeyError(ShareDriveException):
    """
    Raised when an API Key is missing, malformed or unknown.
    """
    pass


class FileNotFoundError(ShareDriveException):
    """
    Raised when a requested file has no record (or no content).
    """
    pass


class ForbiddenError(ShareDriveException):
    """
    Raised when a principal lacks the relationship to a file that an action needs.
    """
    pass


class InvalidTargetError(ShareDriveException):
    """
    Raised when a transfer or share target is not a known principal.
    """
    pass


class FileConflictError(ShareDriveException):
    """
    Raised when an upload would reuse the id of an existing file.
    """
    pass


class InvalidFileNameError(ShareDriveException):
    """
    Raised when no file id can be derived from an uploaded file name.
    """
    pass


class StorageFailureError(ShareDriveException):
    """
    Raised when a durable read or write fails. The operation was not applied.
    """
    pass
