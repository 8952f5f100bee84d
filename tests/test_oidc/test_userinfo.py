"""Tests for the userinfo endpoint client."""

from __future__ import annotations

import httpx
import pytest
from pydantic import ValidationError

from fake_provider import (
    DISCOVERY_URL,
    USERINFO_ENDPOINT,
    FakeProvider,
    failing_transport,
    json_response,
    make_discovery_document,
)
from kreds_oidc.exceptions import ConfigurationMissingError, UserInfoError
from kreds_oidc.models import StrategyConfig, TokenRecord
from kreds_oidc.oidc.discovery import DiscoveryClient
from kreds_oidc.oidc.userinfo import UserInfoFetcher


TOKEN = TokenRecord(access_token="AT1", token_type="Bearer", expires_in=3600)


async def _fetcher(config: StrategyConfig, provider: FakeProvider) -> UserInfoFetcher:
    client = provider.client()
    discovery = DiscoveryClient(config, client)
    await discovery.ensure_configuration()
    return UserInfoFetcher(config, discovery, client)


class TestFetchUserInfo:
    @pytest.mark.asyncio
    async def test_returns_claims(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        fetcher = await _fetcher(strategy_config, provider)
        info = await fetcher.fetch_user_info(TOKEN)
        assert info.sub == "u1"
        assert info.email == "a@b.com"

    @pytest.mark.asyncio
    async def test_sends_token_type_and_access_token(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        fetcher = await _fetcher(strategy_config, provider)
        await fetcher.fetch_user_info(TOKEN.model_copy(update={"token_type": "DPoP"}))
        [request] = provider.requests_to(USERINFO_ENDPOINT)
        assert request.method == "GET"
        assert request.headers["authorization"] == "DPoP AT1"

    @pytest.mark.asyncio
    async def test_accepts_iso_updated_at(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        provider.routes[USERINFO_ENDPOINT] = {
            "sub": "u1",
            "updated_at": "2023-01-01T00:00:00.000Z",
        }
        fetcher = await _fetcher(strategy_config, provider)
        info = await fetcher.fetch_user_info(TOKEN)
        assert info.updated_at == "2023-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_accepts_epoch_updated_at(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        provider.routes[USERINFO_ENDPOINT] = {"sub": "u1", "updated_at": 1672531200}
        fetcher = await _fetcher(strategy_config, provider)
        info = await fetcher.fetch_user_info(TOKEN)
        assert info.updated_at == 1672531200

    @pytest.mark.asyncio
    async def test_missing_endpoint(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        provider.routes[DISCOVERY_URL] = make_discovery_document(userinfo_endpoint=None)
        fetcher = await _fetcher(strategy_config, provider)
        with pytest.raises(ConfigurationMissingError) as excinfo:
            await fetcher.fetch_user_info(TOKEN)
        assert excinfo.value.endpoint == "userinfo_endpoint"
        assert excinfo.value.kind == "configuration_missing"
        assert provider.requests_to(USERINFO_ENDPOINT) == []


class TestFetchUserInfoFailures:
    @pytest.mark.asyncio
    async def test_unauthorized(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        provider.routes[USERINFO_ENDPOINT] = json_response({"error": "invalid_token"}, 401)
        fetcher = await _fetcher(strategy_config, provider)
        with pytest.raises(UserInfoError, match="UserInfo endpoint") as excinfo:
            await fetcher.fetch_user_info(TOKEN)
        assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)
        assert excinfo.value.kind == "userinfo_fetch_failed"

    @pytest.mark.asyncio
    async def test_transport_error(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        provider.routes[USERINFO_ENDPOINT] = failing_transport
        fetcher = await _fetcher(strategy_config, provider)
        with pytest.raises(UserInfoError):
            await fetcher.fetch_user_info(TOKEN)

    @pytest.mark.asyncio
    async def test_claims_without_sub(
        self, strategy_config: StrategyConfig, provider: FakeProvider
    ) -> None:
        provider.routes[USERINFO_ENDPOINT] = {"email": "a@b.com"}
        fetcher = await _fetcher(strategy_config, provider)
        with pytest.raises(UserInfoError) as excinfo:
            await fetcher.fetch_user_info(TOKEN)
        assert isinstance(excinfo.value.cause, ValidationError)
