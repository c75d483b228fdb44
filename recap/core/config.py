"""
Application configuration using pydantic-settings.
"""
from typing import List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recap.models.enums import IdentityProviderType, LLMProviderType


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    PROJECT_NAME: str = "Recap"
    BACKEND_CORS_ORIGINS: Union[List[str], str] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./recap.db"
    CREATE_TABLES_ON_STARTUP: bool = True

    # Summarization LLM
    SUMMARY_LLM_PROVIDER: LLMProviderType = LLMProviderType.GEMINI
    GEMINI_MODEL_NAME: str = "gemini-2.0-flash"
    GEMINI_API_KEY: str = ""
    GROQ_MODEL_NAME: str = "llama-3.3-70b-versatile"
    GROQ_API_KEY: str = ""
    SUMMARY_TIMEOUT_SECONDS: float = 60.0

    # Identity
    IDENTITY_PROVIDER: IdentityProviderType = IdentityProviderType.LOCAL
    SUPABASE_JWT_SECRET: str = ""
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # Auth (locally issued tokens)
    SECRET_KEY: str = "change-me"
    ACCESS_TOKEN_LIFETIME_SECONDS: int = 60 * 60 * 24

    # Credits granted to every newly created user
    INITIAL_CREDITS: int = 10

    RATE_LIMIT_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "logs/app.log"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
