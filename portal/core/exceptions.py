"""
Error types shared by the workflow services and the API layer.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class PortalError(Exception):
    """Base error carrying an HTTP status and an optional field name."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"detail": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(PortalError):
    """Caller-supplied input failed a precondition."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class RecordNotFound(PortalError):
    """The referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, record_id: str):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"{resource} '{record_id}' not found")


class OperationFailed(PortalError):
    """The store call itself errored; message is the store's own."""

    status_code = status.HTTP_502_BAD_GATEWAY


class AuthError(PortalError):
    """Authentication or authorization failure."""

    def __init__(self, message: str, status_code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(message)
        self.status_code = status_code


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """Render a PortalError as a JSON response."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
