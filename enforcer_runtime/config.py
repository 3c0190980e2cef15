from __future__ import annotations

from pydantic import BaseModel
from dotenv import load_dotenv
import os

from enforcement.enforcer import EnforcerConfig

load_dotenv()


class Settings(BaseModel):
    pdp_url: str = os.getenv("PERMIT_PDP_URL", "http://localhost:7766")
    opa_url: str = os.getenv("PERMIT_OPA_URL", "")
    token: str = os.getenv("PERMIT_TOKEN", "")
    pdp_timeout_s: float = float(os.getenv("PDP_TIMEOUT_S", "30"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    audit_enabled: bool = os.getenv("AUDIT_ENABLED", "true").lower() == "true"
    audit_log_path: str = os.getenv("AUDIT_LOG_PATH", "results/audit.jsonl")
    metrics_enabled: bool = os.getenv("METRICS_ENABLED", "true").lower() == "true"
    metrics_path: str = os.getenv("METRICS_PATH", "/metrics")

    def enforcer_config(self) -> EnforcerConfig:
        return EnforcerConfig(
            token=self.token,
            pdp_url=self.pdp_url,
            opa_url=self.opa_url,
            timeout_s=self.pdp_timeout_s,
        )


settings = Settings()
