from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationInfo, field_validator

DEFAULT_TENANT = "default"
DEFAULT_TIMEOUT = 30


class User(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None


class CheckUrlRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: User
    url: str
    http_method: str
    tenant: str = DEFAULT_TENANT
    context: Dict[str, str] = Field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json", exclude={"user"})
        user = self.user.model_dump(mode="json", by_alias=True, exclude_none=True)
        return {"user": user, **payload}


class CheckUrlResponse(BaseModel):
    allow: StrictBool
    query: Dict[str, Any] = Field(default_factory=dict)
    debug: Dict[str, Any] = Field(default_factory=dict)
    result: bool = False

    @field_validator("query", "debug", "result", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return False if info.field_name == "result" else {}
        return value


class OpaCheckUrlResponse(BaseModel):
    result: CheckUrlResponse


def build_check_url_request(
    user: Union[User, str],
    url: str,
    method: str,
    tenant: str = DEFAULT_TENANT,
    context: Optional[Dict[str, str]] = None,
) -> CheckUrlRequest:
    if isinstance(user, str):
        user = User(key=user)
    return CheckUrlRequest(
        user=user,
        url=url,
        http_method=method,
        tenant=tenant,
        context=dict(context) if context else {},
    )
