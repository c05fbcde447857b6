"""Trusted request identity injected by the API gateway.

The gateway authenticates the caller and forwards three headers:

    X-User-Id      opaque user identifier
    X-User-Email   the user's email address
    X-User-Roles   comma-separated roles, optionally ROLE_-prefixed

These headers are only trustworthy when the request arrived from the gateway
over the internal network. They are parsed exactly once, here, into an
immutable ``RequestIdentity`` which is then passed explicitly to commands and
forwarded on outbound RPC calls. A partial or malformed header set is
rejected instead of silently degrading to an anonymous caller.
"""

import json
from collections.abc import Mapping

from fastapi import Header
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from shared.errors import InvalidIdentity

USER_ID_HEADER = "X-User-Id"
USER_EMAIL_HEADER = "X-User-Email"
USER_ROLES_HEADER = "X-User-Roles"


class RequestIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str
    roles: frozenset[str]

    @field_validator("user_id")
    @classmethod
    def _user_id_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("user id must not be blank")
        return value

    @field_validator("email")
    @classmethod
    def _email_shape(cls, value: str) -> str:
        value = value.strip()
        local, _, domain = value.partition("@")
        if not local or "." not in domain:
            raise ValueError(f"malformed email: {value!r}")
        return value

    @field_validator("roles", mode="before")
    @classmethod
    def _normalize_roles(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        roles = set()
        for role in value:
            role = role.strip().upper()
            if role.startswith("ROLE_"):
                role = role[len("ROLE_") :]
            if role:
                roles.add(role)
        if not roles:
            raise ValueError("at least one role is required")
        return frozenset(roles)

    def has_role(self, role: str) -> bool:
        return role.upper() in self.roles

    def to_headers(self) -> dict[str, str]:
        """Headers to forward on internal service-to-service calls."""
        return {
            USER_ID_HEADER: self.user_id,
            USER_EMAIL_HEADER: self.email,
            USER_ROLES_HEADER: ",".join(sorted(self.roles)),
        }

    def to_json(self) -> str:
        return json.dumps({"user_id": self.user_id, "email": self.email, "roles": sorted(self.roles)})

    @classmethod
    def from_json(cls, raw: str | None) -> "RequestIdentity | None":
        if not raw:
            return None
        return cls(**json.loads(raw))

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestIdentity | None":
        """Build the identity from gateway headers.

        Returns None when no identity headers are present at all. Raises
        InvalidIdentity when only some are present or any is malformed.
        """
        lowered = {k.lower(): v for k, v in headers.items()}
        values = {
            "user_id": lowered.get(USER_ID_HEADER.lower()),
            "email": lowered.get(USER_EMAIL_HEADER.lower()),
            "roles": lowered.get(USER_ROLES_HEADER.lower()),
        }

        present = [name for name, value in values.items() if value is not None]
        if not present:
            return None
        if len(present) != len(values):
            missing = sorted(set(values) - set(present))
            raise InvalidIdentity(f"Incomplete identity headers, missing: {', '.join(missing)}")

        try:
            return cls(**values)
        except ValidationError as exc:
            errors = "; ".join(err["msg"] for err in exc.errors())
            raise InvalidIdentity(f"Malformed identity headers: {errors}") from exc


def optional_identity(
    x_user_id: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
    x_user_roles: str | None = Header(default=None),
) -> RequestIdentity | None:
    """FastAPI dependency: the caller's identity, or None when anonymous."""
    headers = {}
    if x_user_id is not None:
        headers[USER_ID_HEADER] = x_user_id
    if x_user_email is not None:
        headers[USER_EMAIL_HEADER] = x_user_email
    if x_user_roles is not None:
        headers[USER_ROLES_HEADER] = x_user_roles
    return RequestIdentity.from_headers(headers)


def require_identity(
    x_user_id: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
    x_user_roles: str | None = Header(default=None),
) -> RequestIdentity:
    """FastAPI dependency: the caller's identity; anonymous callers are rejected."""
    identity = optional_identity(x_user_id, x_user_email, x_user_roles)
    if identity is None:
        raise InvalidIdentity("Missing identity headers")
    return identity
