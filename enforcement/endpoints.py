from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Protocol


class PolicyPackage(str, Enum):
    MAIN = "permit.root"
    BULK = "permit.bulk"
    ALL_TENANTS = "permit.all_tenants"
    USER_PERMISSIONS = "permit.user_permissions"
    ALLOWED_URL = "permit.allowed_url"


@dataclass(frozen=True)
class PolicyOperation:
    sidecar_path: str
    opa_path: str


class EndpointConfig(Protocol):
    pdp_url: str
    opa_url: str


def opa_path_for(package: PolicyPackage) -> str:
    return package.value.replace(".", "/")


_SIDECAR_PATHS = {
    PolicyPackage.MAIN: "/allowed",
    PolicyPackage.BULK: "/allowed/bulk",
    PolicyPackage.ALL_TENANTS: "/allowed/all-tenants",
    PolicyPackage.USER_PERMISSIONS: "/user-permissions",
    PolicyPackage.ALLOWED_URL: "/allowed_url",
}

POLICY_MAP: Mapping[PolicyPackage, PolicyOperation] = MappingProxyType(
    {
        package: PolicyOperation(sidecar_path=path, opa_path=opa_path_for(package))
        for package, path in _SIDECAR_PATHS.items()
    }
)


def resolve_endpoint(config: EndpointConfig, package: PolicyPackage) -> str:
    """
    Full URL for a policy check. An OPA base URL, when configured, wins over
    the sidecar URL and is addressed through its data API.
    """
    operation = POLICY_MAP[package]
    if config.opa_url:
        return f"{config.opa_url.rstrip('/')}/v1/data/{operation.opa_path}"
    return f"{config.pdp_url.rstrip('/')}{operation.sidecar_path}"
