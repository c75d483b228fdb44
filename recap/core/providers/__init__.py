"""
Provider abstraction layer for the external collaborators (LLMs, identity).
"""
from recap.core.providers.llm_provider import (
    LLMProvider,
    LLMMessage,
    LLMResponse,
)
from recap.core.providers.identity_provider import (
    IdentityVerifier,
    IdentityClaims,
    ChainedIdentityVerifier,
)

__all__ = [
    # LLM
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    # Identity
    "IdentityVerifier",
    "IdentityClaims",
    "ChainedIdentityVerifier",
]
