"""
Enums for type-safe values across the application.
"""
from enum import Enum


class LLMRole(str, Enum):
    """Role for LLM provider messages (OpenAI/Gemini/Groq compatible)."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class LLMProviderType(str, Enum):
    """Supported LLM provider types for configuration."""
    GEMINI = "gemini"
    GROQ = "groq"


class IdentityProviderType(str, Enum):
    """Which verifiers accept bearer tokens."""
    LOCAL = "local"
    SUPABASE = "supabase"


class AuthProvider(str, Enum):
    """Provider tag stored on the user record."""
    EMAIL = "email"
    OAUTH = "oauth"
