"""
Application-wide constants and configuration limits.
"""


class PaginationConfig:
    """Configuration for API pagination."""
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100


class RateLimitConfig:
    """Rate limiting thresholds (requests per minute)."""
    GENERATE = "10/minute"


class SummaryConfig:
    """Configuration for the summary generation workflow."""
    DEFAULT_TITLE = "Video Summary"
    TEMPERATURE = 0.4
    MAX_ATTEMPTS = 2  # LLM call attempts before reporting failure
    MAX_TITLE_LENGTH = 500


class AuthConfig:
    """Configuration for locally issued access tokens."""
    TOKEN_AUDIENCE = "recap:auth"
    TOKEN_TYPE = "bearer"
    MIN_PASSWORD_LENGTH = 8
