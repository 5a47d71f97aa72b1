"""HTTP error types shared by the domain services"""

from typing import Any, Optional

from fastapi import HTTPException


class ValidationFailed(HTTPException):
    """Malformed or missing input. Raised before any database access."""

    def __init__(self, message: str):
        super().__init__(status_code=400, detail=message)


class NotFoundError(HTTPException):
    def __init__(self, message: str):
        super().__init__(status_code=404, detail=message)


class ForbiddenError(HTTPException):
    def __init__(self, message: str = "You do not have access to this resource"):
        super().__init__(status_code=403, detail=message)


class ScheduleConflictError(HTTPException):
    """
    A schedule overlap was detected before mutation.

    `conflicts` holds itemized conflict descriptors when the caller can name
    the offending members, and is None when only an aggregate answer exists.
    """

    def __init__(self, message: str, conflicts: Optional[list[dict[str, Any]]] = None):
        super().__init__(status_code=409, detail=message)
        self.conflicts = conflicts
