"""
Abstract interface for identity verification.

An IdentityVerifier turns a bearer credential into the claims of the user it
belongs to. Verifiers never raise for a bad token: they return None, and the
auth gate turns that into a 401.
"""
import uuid
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict


class IdentityClaims(BaseModel):
    """Identity and profile attributes vouched for by a verifier."""

    id: uuid.UUID
    email: str
    name: Optional[str] = None
    image_url: Optional[str] = None
    provider: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class IdentityVerifier(ABC):
    """Validates bearer credentials."""

    @abstractmethod
    async def verify(self, token: str) -> Optional[IdentityClaims]:
        """
        Resolve a bearer token to identity claims.

        Args:
            token: The raw credential from the Authorization header.

        Returns:
            The claims if the token is valid, None otherwise.
        """
        ...


class ChainedIdentityVerifier(IdentityVerifier):
    """Accepts a token if any of the wrapped verifiers accepts it."""

    def __init__(self, verifiers: Sequence[IdentityVerifier]):
        self.verifiers = list(verifiers)

    async def verify(self, token: str) -> Optional[IdentityClaims]:
        for verifier in self.verifiers:
            claims = await verifier.verify(token)
            if claims is not None:
                return claims
        return None
