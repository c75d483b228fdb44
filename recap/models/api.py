"""
Pydantic models for API request/response schemas.

JSON on the wire is camelCase (``videoUrl``, ``keyPoints``); Python code uses
snake_case attribute names. Every response is wrapped in ``Envelope``.
"""
from datetime import datetime
from typing import Generic, List, Optional, TypeVar, Union
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from recap.core.constants import SummaryConfig

DataT = TypeVar("DataT")


class ApiModel(BaseModel):
    """Base for camelCase API models."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(BaseModel, Generic[DataT]):
    """Standard response envelope: ``{success, data?, error?}``."""

    success: bool = True
    data: Optional[DataT] = None
    error: Optional[str] = None


def _require_text(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


# --- Summaries ---

class SummaryContent(ApiModel):
    """Structured summary: title, key points and prose summary."""

    title: str
    key_points: List[str] = Field(default_factory=list)
    full_summary: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SummaryInput(SummaryContent):
    """Structured summary sent by a client; title and prose must not be blank."""

    @field_validator("title", "full_summary")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class GenerateSummaryRequest(ApiModel):
    """Request model for summary generation."""

    video_url: str
    video_id: Optional[str] = None
    title: str = Field(max_length=SummaryConfig.MAX_TITLE_LENGTH)
    transcript: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    @field_validator("video_url", "title", "transcript")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class SaveSummaryRequest(ApiModel):
    """
    Request model for persisting an already generated summary.

    ``summary`` is either structured content or a single text blob in the
    legacy flattened format (see ``recap.services.formatting``).
    """

    video_url: str
    video_id: Optional[str] = None
    transcript: str = ""
    summary: Union[SummaryInput, str]

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    @field_validator("video_url")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)

    @field_validator("summary")
    @classmethod
    def summary_not_blank(cls, v: Union[SummaryInput, str]) -> Union[SummaryInput, str]:
        if isinstance(v, str):
            return _require_text(v)
        return v


class GenerateSummaryResult(SummaryContent):
    """Result of a generation request."""

    summary_id: Optional[uuid.UUID] = None
    cached: bool = False
    credits_remaining: int


class SummaryListItem(SummaryContent):
    """Summary as shown in the user's history."""

    id: uuid.UUID
    video_url: str
    video_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True, frozen=True
    )


class SummaryDetail(SummaryListItem):
    """Single summary including the stored transcript."""

    transcript: str = ""


class SummaryPage(ApiModel):
    """One page of the user's summaries."""

    items: List[SummaryListItem]
    total: int
    page: int
    page_size: int


class DeletedSummary(ApiModel):
    id: uuid.UUID


# --- Accounts ---

class SignUpRequest(ApiModel):
    name: str
    email: EmailStr
    password: str

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", "password")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return _require_text(v)


class SignInRequest(ApiModel):
    email: EmailStr
    password: str

    model_config = ConfigDict(extra="forbid")


class UserProfile(ApiModel):
    """Public view of a user record."""

    id: uuid.UUID
    name: Optional[str] = None
    email: str
    credits: int
    image_url: Optional[str] = None
    provider: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class AuthToken(ApiModel):
    token: str
    token_type: str = "bearer"
    user: UserProfile


class CurrentUser(BaseModel):
    """The authenticated identity attached to a request by the auth gate."""

    id: uuid.UUID
    email: str
    name: str = ""
    image: str = ""

    model_config = ConfigDict(frozen=True)
