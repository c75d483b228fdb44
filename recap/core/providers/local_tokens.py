"""
Access tokens issued by this service for email/password accounts.

Tokens are HS256 JWTs built with the fastapi-users JWT helpers:
``{"sub": <user id>, "email", "name", "aud": "recap:auth", "exp"}``.
"""
import uuid
from typing import Optional

import jwt
from fastapi_users.jwt import decode_jwt, generate_jwt
from loguru import logger

from recap.core.constants import AuthConfig
from recap.core.providers.identity_provider import IdentityClaims, IdentityVerifier
from recap.models.enums import AuthProvider


class LocalTokenAuthority(IdentityVerifier):
    """Issues and verifies locally signed access tokens."""

    def __init__(self, secret: str, lifetime_seconds: int, algorithm: str = "HS256"):
        self.secret = secret
        self.lifetime_seconds = lifetime_seconds
        self.algorithm = algorithm

    def issue(self, user_id: uuid.UUID, email: str, name: Optional[str] = None) -> str:
        data = {
            "sub": str(user_id),
            "email": email,
            "name": name,
            "aud": AuthConfig.TOKEN_AUDIENCE,
        }
        return generate_jwt(data, self.secret, self.lifetime_seconds, algorithm=self.algorithm)

    async def verify(self, token: str) -> Optional[IdentityClaims]:
        try:
            payload = decode_jwt(
                token,
                self.secret,
                audience=[AuthConfig.TOKEN_AUDIENCE],
                algorithms=[self.algorithm],
            )
            user_id = uuid.UUID(payload["sub"])
            email = payload["email"]
        except (jwt.PyJWTError, KeyError, ValueError, TypeError) as e:
            logger.debug(f"Rejected local token: {type(e).__name__}")
            return None

        return IdentityClaims(
            id=user_id,
            email=email,
            name=payload.get("name"),
            provider=AuthProvider.EMAIL.value,
        )
