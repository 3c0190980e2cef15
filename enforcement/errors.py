from __future__ import annotations

from typing import Any, Dict, Optional

import httpx


_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    409: "CONFLICT",
    422: "UNPROCESSABLE_ENTITY",
    429: "TOO_MANY_REQUESTS",
}


class PermitError(Exception):
    def __init__(
        self,
        code: str,
        message: str,
        status_code: Optional[int] = None,
        response_body: str = "",
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "status_code": self.status_code,
        }


class PermitHttpError(PermitError):
    """Non-2xx answer from the PDP. The body is kept for diagnostics."""

    def __init__(self, status_code: int, response_body: str = ""):
        code = _STATUS_CODES.get(status_code)
        if code is None:
            code = "SERVER_ERROR" if status_code >= 500 else "HTTP_ERROR"
        super().__init__(
            code,
            f"PDP responded with HTTP {status_code}",
            status_code=status_code,
            response_body=response_body,
        )


class PermitUnexpectedError(PermitError):
    """
    Local failure while talking to the PDP: encoding the request, sending it,
    reading or decoding the response. The underlying exception is chained as
    __cause__ by the raiser.
    """

    def __init__(self, cause: BaseException, response: Optional[httpx.Response] = None):
        status_code = response.status_code if response is not None else None
        super().__init__(
            "UNEXPECTED_ERROR",
            f"{type(cause).__name__}: {cause}",
            status_code=status_code,
            response_body=_safe_text(response),
        )
        self.cause = cause
        self.response = response


def _safe_text(response: Optional[httpx.Response]) -> str:
    if response is None:
        return ""
    try:
        return response.text
    except (httpx.HTTPError, httpx.StreamError):
        return ""


def http_error_from_response(response: httpx.Response) -> Optional[PermitHttpError]:
    """Returns the error for a non-success response, or None for 2xx."""
    if response.is_success:
        return None
    try:
        response.read()
    except (httpx.HTTPError, httpx.StreamError):
        return PermitHttpError(response.status_code)
    return PermitHttpError(response.status_code, _safe_text(response))
