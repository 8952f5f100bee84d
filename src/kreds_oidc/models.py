"""Canonical Pydantic models shared across all kreds-oidc modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- supplied by the host at construction time:
    :class:`ClientConfig` and :class:`StrategyConfig`.

**Protocol models** -- decoded from the OpenID provider's JSON responses:
    :class:`ProviderMetadata`, :class:`TokenRecord`, :class:`UserAddress`,
    and :class:`UserInfo`.

**Flow models** -- exchanged with the host during one ``authenticate`` call:
    the payload variants (:class:`CodePayload`, :class:`AccessTokenPayload`,
    :class:`RefreshTokenPayload`, :class:`EmptyPayload`), :class:`GrantType`,
    and :class:`VerifyData`.

All models use Pydantic v2. Protocol models use ``extra="allow"`` so that
provider-specific keys (``id_token``, ``end_session_endpoint``, custom
claims) are preserved in ``model_extra``.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Union
from urllib.parse import urlparse

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from kreds_oidc.exceptions import UnsupportedPayloadError


# --- Configuration ---


class ClientConfig(BaseModel):
    """OAuth2 client registration used for every request to the provider.

    Immutable for the lifetime of the strategy. The secret is kept out of
    ``repr()`` so that logging a config never leaks it.

    Example::

        ClientConfig(
            id="my-app",
            secret="s3cret",
            redirect_url="https://app.example.com/callback",
            scopes=["openid", "profile", "email"],
        )
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="OAuth2 client identifier")
    secret: str = Field(repr=False, description="OAuth2 client secret")
    redirect_url: str = Field(
        description="Redirect URI registered with the provider"
    )
    scopes: tuple[str, ...] = Field(
        default=("openid",), description="Requested scopes, in order"
    )

    @property
    def scope(self) -> str:
        """Scopes joined with a single space, as sent on the wire."""
        return " ".join(self.scopes)


class StrategyConfig(BaseModel):
    """Everything an :class:`~kreds_oidc.oidc.strategy.OIDCAuthenticationStrategy` needs besides ``verify``.

    ``server_url`` is the provider's base URL, excluding
    ``.well-known/openid-configuration``.
    """

    model_config = ConfigDict(frozen=True)

    client: ClientConfig
    server_url: str = Field(description="Base URL of the OpenID provider")
    name: str = Field(default="oidc", description="Strategy name used by the host")
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("server_url")
    @classmethod
    def _check_server_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(
                f"server_url must be an absolute http(s) URL, got {value!r}"
            )
        return value


# --- Provider responses ---


class ProviderMetadata(BaseModel):
    """Endpoints advertised by the provider's discovery document.

    Every endpoint is optional: a missing endpoint only becomes an error
    when an operation that needs it runs.
    """

    model_config = ConfigDict(extra="allow")

    authorization_endpoint: Optional[str] = None
    token_endpoint: Optional[str] = None
    userinfo_endpoint: Optional[str] = None

    def is_empty(self) -> bool:
        """Return True when no endpoint is known yet."""
        return not (
            self.authorization_endpoint
            or self.token_endpoint
            or self.userinfo_endpoint
        )


class TokenRecord(BaseModel):
    """Token endpoint response for either grant type."""

    model_config = ConfigDict(extra="allow")

    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    expires_in: Optional[int] = Field(
        default=None, description="Lifetime of the access token in seconds"
    )
    scope: str = ""


class UserAddress(BaseModel):
    """The ``address`` claim (OpenID Connect Core, section 5.1.1)."""

    model_config = ConfigDict(extra="allow")

    formatted: Optional[str] = None
    street_address: Optional[str] = None
    locality: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class UserInfo(BaseModel):
    """Standard claims returned by the userinfo endpoint.

    Only ``sub`` is guaranteed. Non-standard claims are kept in
    ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    sub: str
    name: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    middle_name: Optional[str] = None
    nickname: Optional[str] = None
    preferred_username: Optional[str] = None
    profile: Optional[str] = None
    picture: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    gender: Optional[str] = None
    birthdate: Optional[str] = None
    zoneinfo: Optional[str] = None
    locale: Optional[str] = None
    phone_number: Optional[str] = None
    phone_number_verified: Optional[bool] = None
    address: Optional[UserAddress] = None
    # Epoch seconds in OIDC Core; some providers send an ISO-8601 string.
    updated_at: Optional[Union[int, str]] = None


# --- Authentication flow ---


class GrantType(str, enum.Enum):
    """OAuth2 grant types this strategy can perform against the token endpoint."""

    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"


class CodePayload(BaseModel):
    """Authorization code delivered to the redirect URI."""

    code: str


class RefreshTokenPayload(BaseModel):
    """Refresh token presented to obtain a new access token."""

    refresh_token: str = Field(
        validation_alias=AliasChoices("refresh_token", "refreshToken")
    )


class AccessTokenPayload(BaseModel):
    """Access token delivered directly (implicit flow). Recognised but not supported."""

    access_token: str = Field(
        validation_alias=AliasChoices("access_token", "accessToken")
    )


class EmptyPayload(BaseModel):
    """A payload that is present but carries nothing."""


AuthenticationPayload = Union[
    CodePayload, RefreshTokenPayload, AccessTokenPayload, EmptyPayload
]

_PAYLOAD_KEYS: tuple[tuple[tuple[str, ...], type[BaseModel]], ...] = (
    (("code",), CodePayload),
    (("refresh_token", "refreshToken"), RefreshTokenPayload),
    (("access_token", "accessToken"), AccessTokenPayload),
)


def parse_payload(raw: Any) -> AuthenticationPayload:
    """Classify a host-supplied payload.

    Accepts an already-built payload model or a mapping such as the query
    parameters of a callback request. ``code`` takes precedence over
    ``refresh_token``, which takes precedence over ``access_token``. An
    empty mapping (or any other falsy value) is an :class:`EmptyPayload`.

    Args:
        raw: The payload as observed by the host. Must not be ``None``;
            an absent payload is handled by the caller.

    Returns:
        The matching payload model.

    Raises:
        UnsupportedPayloadError: If *raw* matches no known shape or a
            recognised key holds an invalid value.
    """
    if isinstance(raw, (CodePayload, RefreshTokenPayload, AccessTokenPayload, EmptyPayload)):
        return raw
    if not raw:
        return EmptyPayload()
    if not isinstance(raw, Mapping):
        raise UnsupportedPayloadError(
            f"Unsupported payload type: {type(raw).__name__}"
        )

    for keys, model in _PAYLOAD_KEYS:
        if any(key in raw for key in keys):
            try:
                return model.model_validate(dict(raw))
            except ValidationError as exc:
                raise UnsupportedPayloadError(
                    f"Invalid {keys[0]} payload", cause=exc
                ) from exc

    raise UnsupportedPayloadError(
        f"Unsupported payload keys: {', '.join(sorted(map(str, raw)))}"
    )


class VerifyData(BaseModel):
    """What the strategy hands to the host's verify callback.

    ``expires_at`` is timezone-aware UTC, or ``None`` when the provider did
    not report ``expires_in``.
    """

    token: TokenRecord
    user_info: UserInfo
    expires_at: Optional[datetime] = None
