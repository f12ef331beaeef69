"""
Error taxonomy for the paste lifecycle.
Each error carries the HTTP status code it maps to.
"""


class PasteError(Exception):
    """Base class for paste errors."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(PasteError):
    """Raised when client input is invalid."""

    status_code = 400
    public_message = "Invalid request"


class NotFoundError(PasteError):
    """Raised when a paste is unknown, expired, or out of views."""

    status_code = 404
    public_message = "Paste not found"


class StorageError(PasteError):
    """Raised when the backing store fails."""

    status_code = 500


class ConflictError(StorageError):
    """Raised when inserting a paste whose id already exists."""
