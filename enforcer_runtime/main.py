from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from typing import Any, AsyncIterator, Dict, Union

from enforcer_runtime.config import settings
from enforcer_runtime.audit import AuditLogger
from enforcer_runtime.metrics import metrics
from enforcement.enforcer import PermitEnforcer
from enforcement.models import DEFAULT_TENANT, User

logging.basicConfig(level=settings.log_level)

audit = AuditLogger(settings.audit_log_path) if settings.audit_enabled else None
enforcer = PermitEnforcer(settings.enforcer_config(), audit=audit, metrics=metrics)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    enforcer.close()


app = FastAPI(title="PDP URL Enforcer", lifespan=lifespan)


class CheckUrlCall(BaseModel):
    user: Union[User, str]
    url: str
    http_method: str
    tenant: str = DEFAULT_TENANT
    context: Dict[str, str] = Field(default_factory=dict)


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok", "backend": enforcer.backend.name}


@app.post("/check-url")
def check_url(req: CheckUrlCall) -> Dict[str, Any]:
    decision = enforcer.decide_url(req.user, req.url, req.http_method, req.tenant, req.context)
    return {
        "allow": decision.allow,
        "error": decision.error.to_dict() if decision.error else None,
    }


@app.get(settings.metrics_path, response_class=PlainTextResponse)
def metrics_export() -> str:
    if not settings.metrics_enabled:
        return ""
    return metrics.render_prometheus()
