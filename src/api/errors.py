from __future__ import annotations

from fastapi import status


class ApiError(Exception):
    """
    Base class for errors the API reports as a structured JSON body.

    Response format:
        {"error": "<message>"}
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "internal error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class TaskValidationError(ApiError):
    """A required field is missing or blank."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "title required"


class TaskNotFoundError(ApiError):
    """No task matches the given id."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not found"
