"""
Identity providers used to introspect bearer tokens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class IdentityProvider(Protocol):
    """Resolves a bearer token to its userinfo claims, or None if rejected."""

    def userinfo(self, token: str) -> Optional[dict]:
        ...


@dataclass
class StaticIdentityProvider:
    """Token -> claims table for tests and local development."""

    tokens: dict[str, dict] = field(default_factory=dict)

    def userinfo(self, token: str) -> Optional[dict]:
        return self.tokens.get(token)


@dataclass
class OidcUserinfoProvider:
    """Calls an OIDC userinfo endpoint with the caller's token."""

    userinfo_url: str
    timeout: float = 10.0

    def userinfo(self, token: str) -> Optional[dict]:
        try:
            response = requests.get(
                self.userinfo_url,
                headers={"Authorization": f"{BEARER_PREFIX}{token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Userinfo request failed: %s", exc)
            return None
        if not response.ok:
            return None
        try:
            claims = response.json()
        except ValueError:
            return None
        if not isinstance(claims, dict):
            logger.warning("Userinfo response is not a JSON object")
            return None
        return claims
