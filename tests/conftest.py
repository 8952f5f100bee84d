"""Shared test fixtures for kreds-oidc."""

from __future__ import annotations

import os

import pytest

from fake_provider import SERVER_URL, FakeProvider
from kreds_oidc.models import ClientConfig, StrategyConfig


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        id="my-app",
        secret="s3cret",
        redirect_url="https://app.example.com/callback",
        scopes=["openid", "profile", "email"],
    )


@pytest.fixture
def strategy_config(client_config: ClientConfig) -> StrategyConfig:
    return StrategyConfig(client=client_config, server_url=SERVER_URL)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any KREDS_OIDC_* variables that might leak into tests."""
    for var in list(os.environ):
        if var.startswith("KREDS_OIDC_"):
            monkeypatch.delenv(var, raising=False)
