from __future__ import annotations

import json
from typing import Any, Dict, Protocol

from enforcement.endpoints import EndpointConfig
from enforcement.models import CheckUrlRequest, CheckUrlResponse, OpaCheckUrlResponse


class PolicyBackend(Protocol):
    name: str

    def wrap_request(self, request: CheckUrlRequest) -> Dict[str, Any]:
        ...

    def unwrap_response(self, body: bytes) -> CheckUrlResponse:
        ...


class SidecarBackend:
    """Native PDP sidecar: bodies go over the wire as-is."""

    name = "sidecar"

    def wrap_request(self, request: CheckUrlRequest) -> Dict[str, Any]:
        return request.to_payload()

    def unwrap_response(self, body: bytes) -> CheckUrlResponse:
        return CheckUrlResponse.model_validate_json(body)


class OpaBackend:
    """OPA data API: request under "input", decision under "result"."""

    name = "opa"

    def wrap_request(self, request: CheckUrlRequest) -> Dict[str, Any]:
        return {"input": request.to_payload()}

    def unwrap_response(self, body: bytes) -> CheckUrlResponse:
        return OpaCheckUrlResponse.model_validate_json(body).result


def select_backend(config: EndpointConfig) -> PolicyBackend:
    if config.opa_url:
        return OpaBackend()
    return SidecarBackend()


def serialize_envelope(envelope: Dict[str, Any]) -> bytes:
    # raises TypeError/ValueError rather than emitting partial output
    return json.dumps(envelope, separators=(",", ":"), allow_nan=False).encode("utf-8")
