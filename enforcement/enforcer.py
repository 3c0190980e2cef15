from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from enforcement.backends import PolicyBackend, select_backend, serialize_envelope
from enforcement.endpoints import PolicyPackage, resolve_endpoint
from enforcement.errors import PermitError, PermitUnexpectedError, http_error_from_response
from enforcement.models import (
    DEFAULT_TENANT,
    DEFAULT_TIMEOUT,
    CheckUrlResponse,
    User,
    build_check_url_request,
)
from enforcement.transport import send

logger = logging.getLogger(__name__)


class EnforcerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str = ""
    pdp_url: str = "http://localhost:7766"
    opa_url: str = ""
    timeout_s: float = DEFAULT_TIMEOUT


@dataclass
class UrlDecision:
    allow: bool
    error: Optional[PermitError] = None
    response: Optional[CheckUrlResponse] = None


def parse_check_url_response(
    response: httpx.Response,
    backend: PolicyBackend,
) -> CheckUrlResponse:
    http_error = http_error_from_response(response)
    if http_error is not None:
        logger.error(
            "erroneous http response from PDP for check_url",
            extra={
                "status_code": http_error.status_code,
                "response_body": http_error.response_body,
                "backend": backend.name,
            },
        )
        raise http_error

    try:
        body = response.read()
    except (httpx.HTTPError, httpx.StreamError) as exc:
        err = PermitUnexpectedError(exc)
        logger.error(
            "error reading check_url response from PDP",
            extra={"error": err.message, "backend": backend.name},
        )
        raise err from exc

    try:
        return backend.unwrap_response(body)
    except (ValidationError, ValueError) as exc:
        err = PermitUnexpectedError(exc, response)
        logger.error(
            "error unmarshalling check_url response",
            extra={
                "error": err.message,
                "response_body": err.response_body,
                "backend": backend.name,
            },
        )
        raise err from exc


class PermitEnforcer:
    """
    Client for URL checks against a policy decision point.

    The backend (native sidecar or OPA data API) is fixed when the enforcer is
    built, based on whether an OPA URL is configured.
    """

    def __init__(
        self,
        config: EnforcerConfig,
        client: Optional[httpx.Client] = None,
        audit: Any = None,
        metrics: Any = None,
    ):
        self.config = config
        self.backend = select_backend(config)
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=config.timeout_s)
        self.audit = audit
        self.metrics = metrics

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "PermitEnforcer":
        return self

    def __exit__(self, *_args: Any) -> None:
        self.close()

    def allowed_url_endpoint(self) -> str:
        return resolve_endpoint(self.config, PolicyPackage.ALLOWED_URL)

    def check_url(
        self,
        user: Union[User, str],
        url: str,
        method: str,
        tenant: str = DEFAULT_TENANT,
        context: Optional[Dict[str, str]] = None,
    ) -> bool:
        """
        Asks the PDP whether `user` may call `method` on `url` in `tenant`.

        Raises PermitHttpError for non-2xx answers and PermitUnexpectedError
        for any local failure.
        """
        return self.query_url(user, url, method, tenant, context).allow

    def query_url(
        self,
        user: Union[User, str],
        url: str,
        method: str,
        tenant: str = DEFAULT_TENANT,
        context: Optional[Dict[str, str]] = None,
    ) -> CheckUrlResponse:
        try:
            request = build_check_url_request(user, url, method, tenant, context)
            body = serialize_envelope(self.backend.wrap_request(request))
        except (TypeError, ValueError) as exc:
            err = PermitUnexpectedError(exc)
            logger.error("error marshalling check_url request", extra={"error": err.message})
            raise err from exc

        endpoint = self.allowed_url_endpoint()
        try:
            response = send(self.client, endpoint, body, self.config.token)
        except PermitUnexpectedError as err:
            logger.error(
                "error sending check_url request to PDP",
                extra={"error": err.message, "endpoint": endpoint, "backend": self.backend.name},
            )
            raise

        result = parse_check_url_response(response, self.backend)
        logger.debug(
            "check_url decision",
            extra={"allow": result.allow, "url": url, "http_method": method, "tenant": tenant},
        )
        return result

    def decide_url(
        self,
        user: Union[User, str],
        url: str,
        method: str,
        tenant: str = DEFAULT_TENANT,
        context: Optional[Dict[str, str]] = None,
    ) -> UrlDecision:
        """Same as check_url, but failures come back as UrlDecision(allow=False, error=...)."""
        t0 = time.perf_counter()
        try:
            result = self.query_url(user, url, method, tenant, context)
            decision = UrlDecision(allow=result.allow, response=result)
        except PermitError as err:
            decision = UrlDecision(allow=False, error=err)
        self._record(decision, user, url, method, tenant, t0)
        return decision

    def _record(
        self,
        decision: UrlDecision,
        user: Union[User, str],
        url: str,
        method: str,
        tenant: str,
        t0: float,
    ) -> None:
        latency_ms = (time.perf_counter() - t0) * 1000.0
        if decision.error is not None:
            outcome = "error"
        else:
            outcome = "allow" if decision.allow else "deny"

        if self.metrics is not None:
            self.metrics.inc("pdp_check_requests_total", self.backend.name)
            self.metrics.inc("pdp_check_decisions_total", outcome)
            self.metrics.observe_latency(PolicyPackage.ALLOWED_URL.value, latency_ms)

        if self.audit is not None:
            err = decision.error
            self.audit.emit(
                {
                    "operation": PolicyPackage.ALLOWED_URL.value,
                    "user": user.key if isinstance(user, User) else user,
                    "url": url,
                    "http_method": method,
                    "tenant": tenant,
                    "backend": self.backend.name,
                    "decision": outcome,
                    "error_code": err.code if err else None,
                    "status_code": err.status_code if err else None,
                    "latency_ms": latency_ms,
                }
            )
