from fastapi import HTTPException, status


class AccessControlError(HTTPException):
    """Base for errors an enclosing FastAPI layer can return as-is."""


class Forbidden(AccessControlError):
    # The detail names the attempted action only, never the caller's role.
    def __init__(self, action: str):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"User is not authorized to {action}.",
        )


class NotFound(AccessControlError):
    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class Conflict(AccessControlError):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class InvalidRole(ValueError):
    """Unrecognised role value. Never escapes authorize(), which denies instead."""

    def __init__(self, value):
        super().__init__(f"Unknown channel role: {value!r}")
        self.value = value
