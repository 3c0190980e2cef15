from __future__ import annotations

import httpx

from enforcement.errors import PermitUnexpectedError

CONTENT_TYPE_KEY = "Content-Type"
CONTENT_TYPE_VALUE = "application/json"
AUTH_KEY = "Authorization"


def build_headers(token: str) -> dict[str, str]:
    return {CONTENT_TYPE_KEY: CONTENT_TYPE_VALUE, AUTH_KEY: f"Bearer {token}"}


def send(
    client: httpx.Client,
    url: str,
    body: bytes,
    token: str,
    method: str = "POST",
) -> httpx.Response:
    # a malformed base URL or a non-ascii token fails while building the request
    try:
        request = client.build_request(method, url, content=body, headers=build_headers(token))
        return client.send(request)
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
        raise PermitUnexpectedError(exc, getattr(exc, "response", None)) from exc
