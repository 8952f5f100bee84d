"""Tests for authorization URL construction."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlsplit

from kreds_oidc.models import ClientConfig, ProviderMetadata
from kreds_oidc.oidc.authorize import build_authorization_url


def _metadata(endpoint: str | None = "https://idp/auth") -> ProviderMetadata:
    return ProviderMetadata(authorization_endpoint=endpoint)


class TestBuildAuthorizationUrl:
    def test_exact_url(self, client_config: ClientConfig) -> None:
        url = build_authorization_url(_metadata(), client_config)
        assert url == (
            "https://idp/auth?response_type=code&client_id=my-app"
            "&scope=openid+profile+email"
            "&redirect_uri=https%3A%2F%2Fapp.example.com%2Fcallback"
        )

    def test_parameter_order(self, client_config: ClientConfig) -> None:
        url = build_authorization_url(_metadata(), client_config)
        assert url is not None
        keys = [key for key, _ in parse_qsl(urlsplit(url).query)]
        assert keys == ["response_type", "client_id", "scope", "redirect_uri"]

    def test_is_deterministic(self, client_config: ClientConfig) -> None:
        metadata = _metadata()
        assert build_authorization_url(metadata, client_config) == build_authorization_url(
            metadata, client_config
        )

    def test_no_state_nonce_or_pkce(self, client_config: ClientConfig) -> None:
        url = build_authorization_url(_metadata(), client_config)
        assert url is not None
        params = dict(parse_qsl(urlsplit(url).query))
        for absent in ("state", "nonce", "code_challenge", "code_challenge_method"):
            assert absent not in params

    def test_existing_query_is_preserved(self, client_config: ClientConfig) -> None:
        url = build_authorization_url(_metadata("https://idp/auth?tenant=acme"), client_config)
        assert url is not None
        pairs = parse_qsl(urlsplit(url).query)
        assert pairs[0] == ("tenant", "acme")
        assert pairs[1] == ("response_type", "code")

    def test_missing_endpoint_returns_none(self, client_config: ClientConfig) -> None:
        assert build_authorization_url(_metadata(None), client_config) is None

    def test_empty_endpoint_returns_none(self, client_config: ClientConfig) -> None:
        assert build_authorization_url(_metadata(""), client_config) is None
