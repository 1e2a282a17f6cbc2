"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from excaliapp.backend.db import DbClient, InMemoryDbClient, SqlDbClient
from excaliapp.backend.identity import (
    IdentityProvider,
    OidcUserinfoProvider,
    StaticIdentityProvider,
)
from excaliapp.config import get_settings

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_identity_provider: IdentityProvider | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so drawings persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_identity_provider() -> IdentityProvider:
    global _identity_provider
    if _identity_provider:
        return _identity_provider

    settings = get_settings()
    if settings.oidc_userinfo_url:
        _identity_provider = OidcUserinfoProvider(
            userinfo_url=settings.oidc_userinfo_url,
            timeout=settings.oidc_timeout_seconds,
        )
    else:
        # Without an identity provider every token is rejected.
        logger.warning("OIDC_USERINFO_URL is not set; all requests will be unauthorized")
        _identity_provider = StaticIdentityProvider()
    return _identity_provider
