"""
Dependency injection factories for FastAPI.

Collaborators are built here, selected by configuration, and handed to the
services through ``Depends``. Tests swap any of them with
``app.dependency_overrides``.
"""
from functools import lru_cache
from fastapi import Depends
from fastapi_users.password import PasswordHelper
from sqlalchemy.ext.asyncio import AsyncSession

from recap.core.config import settings
from recap.core.db import get_db_session

# Repositories
from recap.repositories.users import UserRepository
from recap.repositories.summaries import SummaryRepository

# Provider interfaces
from recap.core.providers.llm_provider import LLMProvider
from recap.core.providers.identity_provider import IdentityVerifier, ChainedIdentityVerifier

# Provider type enums
from recap.models.enums import LLMProviderType, IdentityProviderType

# Concrete providers
from recap.core.providers.gemini_provider import GeminiProvider
from recap.core.providers.groq_provider import GroqProvider
from recap.core.providers.local_tokens import LocalTokenAuthority
from recap.core.providers.supabase_identity import SupabaseIdentityVerifier

# Services
from recap.services.accounts import AccountService
from recap.services.credits import CreditLedger
from recap.services.directory import UserDirectory
from recap.services.summarization import SummarizationService
from recap.services.summaries import SummaryService


# =============================================================================
# PROVIDER FACTORIES
# =============================================================================

@lru_cache
def get_summary_llm_provider() -> LLMProvider:
    """
    Get LLM provider for summarization.

    Default: Gemini (configured in settings.SUMMARY_LLM_PROVIDER)
    """
    provider_type = settings.SUMMARY_LLM_PROVIDER

    if provider_type == LLMProviderType.GEMINI:
        return GeminiProvider(
            api_key=settings.GEMINI_API_KEY,
            model_name=settings.GEMINI_MODEL_NAME,
        )
    elif provider_type == LLMProviderType.GROQ:
        return GroqProvider(
            api_key=settings.GROQ_API_KEY,
            model_name=settings.GROQ_MODEL_NAME,
            timeout=settings.SUMMARY_TIMEOUT_SECONDS,
        )
    else:
        raise ValueError(f"Unknown LLM provider: {provider_type}")


@lru_cache
def get_token_authority() -> LocalTokenAuthority:
    """Issuer/verifier of the tokens handed out by /auth/signin and /auth/signup."""
    return LocalTokenAuthority(
        secret=settings.SECRET_KEY,
        lifetime_seconds=settings.ACCESS_TOKEN_LIFETIME_SECONDS,
    )


@lru_cache
def get_identity_verifier() -> IdentityVerifier:
    """
    Get the verifier used by the auth gate.

    Locally issued tokens are always accepted; with IDENTITY_PROVIDER=supabase
    Supabase access tokens are accepted as well.
    """
    provider_type = settings.IDENTITY_PROVIDER

    if provider_type == IdentityProviderType.LOCAL:
        return get_token_authority()
    elif provider_type == IdentityProviderType.SUPABASE:
        if not settings.SUPABASE_JWT_SECRET:
            raise ValueError("SUPABASE_JWT_SECRET must be set when IDENTITY_PROVIDER=supabase")
        return ChainedIdentityVerifier([
            SupabaseIdentityVerifier(
                jwt_secret=settings.SUPABASE_JWT_SECRET,
                audience=settings.SUPABASE_JWT_AUDIENCE,
            ),
            get_token_authority(),
        ])
    else:
        raise ValueError(f"Unknown identity provider: {provider_type}")


@lru_cache
def get_password_helper() -> PasswordHelper:
    return PasswordHelper()


# =============================================================================
# REPOSITORY FACTORIES
# =============================================================================

def get_user_repository(
    db: AsyncSession = Depends(get_db_session),
) -> UserRepository:
    return UserRepository(db)


def get_summary_repository(
    db: AsyncSession = Depends(get_db_session),
) -> SummaryRepository:
    return SummaryRepository(db)


# =============================================================================
# SERVICE FACTORIES
# =============================================================================

def get_user_directory(
    user_repository: UserRepository = Depends(get_user_repository),
) -> UserDirectory:
    """Get the directory that mirrors verified identities into the users table."""
    return UserDirectory(
        user_repository=user_repository,
        initial_credits=settings.INITIAL_CREDITS,
    )


def get_credit_ledger(
    user_repository: UserRepository = Depends(get_user_repository),
) -> CreditLedger:
    return CreditLedger(user_repository=user_repository)


def get_summarization_service(
    llm_provider: LLMProvider = Depends(get_summary_llm_provider),
) -> SummarizationService:
    return SummarizationService(
        llm_provider=llm_provider,
        timeout_seconds=settings.SUMMARY_TIMEOUT_SECONDS,
    )


def get_summary_service(
    summarization_service: SummarizationService = Depends(get_summarization_service),
    summary_repository: SummaryRepository = Depends(get_summary_repository),
    credit_ledger: CreditLedger = Depends(get_credit_ledger),
    user_repository: UserRepository = Depends(get_user_repository),
) -> SummaryService:
    """
    Get the summary service.

    The repositories and the ledger resolve ``get_db_session`` once per
    request, so they share a session and therefore a transaction.
    """
    return SummaryService(
        summarization_service=summarization_service,
        summary_repository=summary_repository,
        credit_ledger=credit_ledger,
        user_repository=user_repository,
    )


def get_account_service(
    user_repository: UserRepository = Depends(get_user_repository),
    token_authority: LocalTokenAuthority = Depends(get_token_authority),
    password_helper: PasswordHelper = Depends(get_password_helper),
) -> AccountService:
    return AccountService(
        user_repository=user_repository,
        token_authority=token_authority,
        password_helper=password_helper,
        initial_credits=settings.INITIAL_CREDITS,
    )
