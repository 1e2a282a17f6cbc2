"""
Error taxonomy shared by the storage backends, the service facade and the API.
"""

from __future__ import annotations

from typing import Optional


class StorageError(Exception):
    """Base class for storage failures. `status_code` mirrors the HTTP status."""

    status_code = 500

    def __init__(
        self, message: str = "", status_code: Optional[int] = None, body: str = ""
    ):
        super().__init__(message)
        self.message = message
        self.body = body
        if status_code is not None:
            self.status_code = status_code


class BadRequest(StorageError):
    status_code = 400


class Unauthorized(StorageError):
    status_code = 401


class Forbidden(StorageError):
    status_code = 403


class NotFound(StorageError):
    """No such record, or the record belongs to someone else."""

    status_code = 404


class FileNotFound(NotFound):
    def __init__(self, file_id: str):
        super().__init__(f"File not found: {file_id}")
        self.file_id = file_id


class UnknownStorageError(StorageError):
    status_code = 500


class ApiResponseError(UnknownStorageError):
    """A non-2xx response from the drawings API outside the statuses above."""


_STATUS_ERRORS = {
    400: BadRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
}


def error_from_response(action: str, response) -> StorageError:
    """Translate a failed `requests` response into the matching StorageError."""
    body = response.text or ""
    error_class = _STATUS_ERRORS.get(response.status_code, ApiResponseError)
    return error_class(
        f"Failed to {action}: {response.status_code} {body}".strip(),
        status_code=response.status_code,
        body=body,
    )
