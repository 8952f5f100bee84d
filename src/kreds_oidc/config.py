"""Configuration loading with credential sources and precedence resolution.

This module builds the :class:`~kreds_oidc.models.StrategyConfig` a host
passes to :class:`~kreds_oidc.oidc.strategy.OIDCAuthenticationStrategy`:

* **Credential resolution** -- :func:`resolve_credential` reads secrets
  from env vars, files, or takes them literally.
* **JSON files** -- :func:`load_config` reads a config document from disk.
* **Environment** -- :func:`config_from_env` reads ``KREDS_OIDC_*`` variables.
* **Precedence resolution** -- :func:`resolve_config` merges environment
  variables over a JSON file over model defaults.

Config documents use the field names of
:class:`~kreds_oidc.models.StrategyConfig`; the client secret may be given
as ``secret`` or as a ``secret_source`` descriptor::

    {
        "server_url": "https://idp.example.com/realms/main",
        "client": {
            "id": "my-app",
            "secret_source": "env:MY_APP_SECRET",
            "redirect_url": "https://app.example.com/callback",
            "scopes": ["openid", "email"]
        }
    }
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from kreds_oidc.exceptions import ConfigError
from kreds_oidc.models import StrategyConfig

ENV_PREFIX = "KREDS_OIDC_"

# Environment variable suffix -> (section, field). ``None`` section is top level.
_ENV_FIELDS: dict[str, tuple[Optional[str], str]] = {
    "SERVER_URL": (None, "server_url"),
    "NAME": (None, "name"),
    "TIMEOUT": (None, "timeout"),
    "VERIFY_SSL": (None, "verify_ssl"),
    "CLIENT_ID": ("client", "id"),
    "CLIENT_SECRET": ("client", "secret"),
    "CLIENT_SECRET_SOURCE": ("client", "secret_source"),
    "REDIRECT_URL": ("client", "redirect_url"),
    "SCOPES": ("client", "scopes"),
}


def resolve_credential(source: str) -> str:
    """Resolve a client secret from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - anything else -- used literally

    Args:
        source: The source descriptor string.

    Returns:
        The resolved secret.

    Raises:
        ConfigError: If *source* is not a string or names an env var or
            file that can't be read.
    """
    if not isinstance(source, str):
        raise ConfigError(
            f"Credential source must be a string, got {type(source).__name__}"
        )

    scheme, sep, target = source.partition(":")
    if not sep or scheme not in ("env", "file"):
        return source

    if not target:
        raise ConfigError(f"Credential source '{source}' names no {scheme} target")

    if scheme == "env":
        value = os.environ.get(target)
        if value is None:
            raise ConfigError(
                f"Environment variable '{target}' is not set (source: {source})"
            )
        return value

    path = Path(target).expanduser()
    if not path.is_file():
        raise ConfigError(f"Credential file not found: {path} (source: {source})")
    try:
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Cannot read credential file {path}: {exc}", cause=exc) from exc


def _split_scopes(value: str) -> list[str]:
    return [scope for scope in re.split(r"[\s,]+", value) if scope]


def _read_env(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``KREDS_OIDC_*`` variables into a nested config dict."""
    data: dict[str, Any] = {}
    for suffix, (section, field_name) in _ENV_FIELDS.items():
        value = environ.get(ENV_PREFIX + suffix)
        if not value:
            continue
        parsed: Any = _split_scopes(value) if suffix == "SCOPES" else value
        target = data.setdefault(section, {}) if section else data
        target[field_name] = parsed
    return data


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def build_config(data: Mapping[str, Any]) -> StrategyConfig:
    """Validate a raw config dict into a :class:`StrategyConfig`.

    Resolves ``client.secret_source`` through :func:`resolve_credential`
    unless a literal ``client.secret`` is present.

    Raises:
        ConfigError: If the document is incomplete or invalid.
    """
    raw = dict(data)
    client_data = raw.get("client") or {}
    if not isinstance(client_data, Mapping):
        raise ConfigError(
            f"Config section 'client' must be an object, got {type(client_data).__name__}"
        )
    client = dict(client_data)
    secret_source = client.pop("secret_source", None)
    if secret_source is not None and not isinstance(secret_source, str):
        raise ConfigError(
            "Config field 'client.secret_source' must be a string, "
            f"got {type(secret_source).__name__}"
        )
    if "secret" not in client and secret_source:
        client["secret"] = resolve_credential(secret_source)
    raw["client"] = client

    try:
        return StrategyConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid OIDC strategy configuration: {exc}", cause=exc) from exc


def load_config(path: str | Path) -> StrategyConfig:
    """Load a :class:`StrategyConfig` from a JSON file.

    Raises:
        ConfigError: If the file is missing, not JSON, or invalid.
    """
    return build_config(_read_json(Path(path)))


def _read_json(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}", cause=exc) from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> StrategyConfig:
    """Build a :class:`StrategyConfig` purely from ``KREDS_OIDC_*`` variables.

    ``KREDS_OIDC_SCOPES`` is split on whitespace and commas.

    Raises:
        ConfigError: If required variables are missing or invalid.
    """
    return build_config(_read_env(os.environ if environ is None else environ))


def resolve_config(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StrategyConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. Environment variables (``KREDS_OIDC_SERVER_URL``, ...)
        2. JSON config file at *path*
        3. Model defaults

    A literal secret from a higher layer wins over a ``secret_source`` from
    a lower one.
    """
    base: dict[str, Any] = _read_json(Path(path)) if path is not None else {}
    env_data = _read_env(os.environ if environ is None else environ)

    env_client = env_data.get("client", {})
    base_client = base.get("client")
    if isinstance(base_client, dict):
        if "secret" in env_client:
            base_client = {k: v for k, v in base_client.items() if k != "secret_source"}
        elif "secret_source" in env_client:
            base_client = {k: v for k, v in base_client.items() if k != "secret"}
        base = {**base, "client": base_client}

    return build_config(_merge(base, env_data))
