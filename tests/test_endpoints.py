from __future__ import annotations

import pytest

from enforcement.endpoints import POLICY_MAP, PolicyPackage, opa_path_for, resolve_endpoint
from enforcement.enforcer import EnforcerConfig


def test_every_package_has_one_operation() -> None:
    assert set(POLICY_MAP) == set(PolicyPackage)


def test_opa_path_is_dotted_name_with_slashes() -> None:
    assert POLICY_MAP[PolicyPackage.ALLOWED_URL].opa_path == "permit/allowed_url"
    for package, operation in POLICY_MAP.items():
        assert operation.opa_path == package.value.replace(".", "/")
        assert operation.opa_path == opa_path_for(package)


def test_sidecar_paths() -> None:
    assert POLICY_MAP[PolicyPackage.MAIN].sidecar_path == "/allowed"
    assert POLICY_MAP[PolicyPackage.BULK].sidecar_path == "/allowed/bulk"
    assert POLICY_MAP[PolicyPackage.ALL_TENANTS].sidecar_path == "/allowed/all-tenants"
    assert POLICY_MAP[PolicyPackage.USER_PERMISSIONS].sidecar_path == "/user-permissions"
    assert POLICY_MAP[PolicyPackage.ALLOWED_URL].sidecar_path == "/allowed_url"


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        POLICY_MAP[PolicyPackage.MAIN] = POLICY_MAP[PolicyPackage.BULK]  # type: ignore[index]


def test_resolve_sidecar_endpoint() -> None:
    config = EnforcerConfig(pdp_url="http://pdp.local:7766/")
    assert resolve_endpoint(config, PolicyPackage.ALLOWED_URL) == "http://pdp.local:7766/allowed_url"


def test_resolve_opa_endpoint_wins_when_configured() -> None:
    config = EnforcerConfig(pdp_url="http://pdp.local:7766", opa_url="http://opa.local:8181")
    assert (
        resolve_endpoint(config, PolicyPackage.ALLOWED_URL)
        == "http://opa.local:8181/v1/data/permit/allowed_url"
    )
    assert resolve_endpoint(config, PolicyPackage.MAIN) == "http://opa.local:8181/v1/data/permit/root"


def test_unknown_package_is_rejected() -> None:
    with pytest.raises(KeyError):
        resolve_endpoint(EnforcerConfig(), "permit.unknown")  # type: ignore[arg-type]
