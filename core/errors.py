"""
Typed errors raised by the account and task services.

Every error carries an HTTP-like ``status`` and a human readable
``message``.  The boundary layer maps them onto its own transport;
nothing in ``core`` catches or logs them.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ResponseError(Exception):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "errors": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class _StatusError(ResponseError):
    """A ``ResponseError`` kind whose status is fixed by its class."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(self.status_code, message)


class RequestValidationError(_StatusError):
    """Raw input did not match its schema.  Raised before any store access."""

    status_code = 400

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.details = details or []


class ConflictError(_StatusError):
    status_code = 400


class UnauthorizedError(_StatusError):
    status_code = 401


class NotFoundError(_StatusError):
    status_code = 404
