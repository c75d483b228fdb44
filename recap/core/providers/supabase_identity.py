"""
Supabase implementation of IdentityVerifier.

Supabase access tokens are JWTs signed with the project's JWT secret, so they
are verified locally instead of calling the Supabase auth API on every
request.
"""
import uuid
from typing import Optional

import jwt
from fastapi_users.jwt import decode_jwt
from loguru import logger

from recap.core.providers.identity_provider import IdentityClaims, IdentityVerifier
from recap.models.enums import AuthProvider


class SupabaseIdentityVerifier(IdentityVerifier):
    """
    Verifies Supabase-issued access tokens.

    Profile attributes come from ``user_metadata`` (``full_name``/``name``,
    ``avatar_url``/``picture``) and the provider tag from
    ``app_metadata.provider``.
    """

    def __init__(self, jwt_secret: str, audience: str = "authenticated"):
        self.jwt_secret = jwt_secret
        self.audience = audience

    async def verify(self, token: str) -> Optional[IdentityClaims]:
        try:
            payload = decode_jwt(
                token,
                self.jwt_secret,
                audience=[self.audience],
                algorithms=["HS256"],
            )
            user_id = uuid.UUID(payload["sub"])
        except (jwt.PyJWTError, KeyError, ValueError, TypeError) as e:
            logger.debug(f"Rejected Supabase token: {type(e).__name__}")
            return None

        email = payload.get("email")
        if not email:
            logger.debug(f"Supabase token for {user_id} carries no email")
            return None

        user_metadata = payload.get("user_metadata") or {}
        app_metadata = payload.get("app_metadata") or {}

        return IdentityClaims(
            id=user_id,
            email=email,
            name=user_metadata.get("full_name") or user_metadata.get("name"),
            image_url=user_metadata.get("avatar_url") or user_metadata.get("picture"),
            provider=app_metadata.get("provider") or AuthProvider.OAUTH.value,
        )
