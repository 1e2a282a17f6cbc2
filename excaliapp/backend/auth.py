"""
FastAPI dependency that turns the Authorization header into the caller's identity.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException

from excaliapp.backend.dependencies import get_identity_provider
from excaliapp.backend.identity import BEARER_PREFIX, IdentityProvider

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        return ""
    return authorization.replace(BEARER_PREFIX, "", 1).strip()


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> str:
    """
    Resolve the caller's identity (the `email` claim) from the Authorization header.

    401 when the token is missing or rejected by the identity provider,
    400 when the provider knows the token but reports no email.
    """
    token = extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized")

    claims = provider.userinfo(token)
    if claims is None:
        logger.warning("Rejected bearer token")
        raise HTTPException(status_code=401, detail="Unauthorized")

    email = claims.get("email")
    if not email:
        raise HTTPException(status_code=400, detail="User not found.")
    return email
