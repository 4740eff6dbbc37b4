"""Caller-facing errors raised by the drawing log store."""

from typing import Optional


class GuestbookError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidRequestError(GuestbookError):
    status_code = 400
    message = "Missing or invalid secret key or drawing index."


class IndexOutOfBoundsError(GuestbookError):
    status_code = 400
    message = "Drawing index out of bounds."


class AuthorizationError(GuestbookError):
    status_code = 403
    message = "Invalid secret key."


class DrawingsNotFoundError(GuestbookError):
    status_code = 404
    message = "No drawings found to delete."


class BlockedSubmissionError(GuestbookError):
    status_code = 503
    message = "Submissions are currently unavailable."


class StorageError(GuestbookError):
    """Backend get/put failure. The message stays generic; details go to the log."""

    status_code = 500
    message = "Storage backend error"
