from .api import (
    Envelope,
    SummaryContent,
    SummaryInput,
    GenerateSummaryRequest,
    GenerateSummaryResult,
    SaveSummaryRequest,
    SummaryListItem,
    SummaryDetail,
    SummaryPage,
    DeletedSummary,
    SignUpRequest,
    SignInRequest,
    UserProfile,
    AuthToken,
    CurrentUser,
)
from .enums import LLMRole, LLMProviderType, IdentityProviderType, AuthProvider
