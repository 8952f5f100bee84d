"""Authorization redirect URL construction."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode, urlsplit, urlunsplit

from kreds_oidc.models import ClientConfig, ProviderMetadata


def build_authorization_url(
    metadata: ProviderMetadata, client: ClientConfig
) -> Optional[str]:
    """Build the URL the user agent must be sent to in order to authorize.

    Appends ``response_type``, ``client_id``, ``scope`` and ``redirect_uri``
    (in that order) to the provider's authorization endpoint, after any
    query string the endpoint already has. No ``state``, ``nonce`` or PKCE
    challenge is added.

    Returns:
        The authorization URL, or ``None`` when the authorization endpoint
        is unknown.
    """
    endpoint = metadata.authorization_endpoint
    if not endpoint:
        return None

    params = urlencode(
        [
            ("response_type", "code"),
            ("client_id", client.id),
            ("scope", client.scope),
            ("redirect_uri", client.redirect_url),
        ]
    )
    parts = urlsplit(endpoint)
    query = f"{parts.query}&{params}" if parts.query else params
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))
