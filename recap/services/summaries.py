"""
Summary service: generation with credit accounting, and the user's history.

Generation flow:
1. Resolve the source reference of the video (global cache key)
2. Return an existing generated summary of the same source without charging
3. Pre-check the user's credit balance
4. Ask the summarizer for a structured summary
5. Spend one credit and store the summary in a single transaction
"""
import re
import uuid
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from recap.core.exceptions import (
    InsufficientCreditsError,
    InternalServerError,
    NotFoundError,
    UpstreamServiceError,
)
from recap.models import (
    GenerateSummaryRequest,
    GenerateSummaryResult,
    SaveSummaryRequest,
    SummaryContent,
    SummaryDetail,
    SummaryListItem,
    SummaryPage,
)
from recap.models.sql import SummaryModel
from recap.repositories.summaries import SummaryRepository
from recap.repositories.users import UserRepository
from recap.services.credits import CreditLedger
from recap.services.formatting import parse_flattened_summary
from recap.services.summarization import SummarizationService, VideoContext

_VIDEO_ID_PATTERNS = [
    re.compile(r"[?&]v=([0-9A-Za-z_-]{11})"),
    re.compile(r"youtu\.be/([0-9A-Za-z_-]{11})"),
    re.compile(r"embed/([0-9A-Za-z_-]{11})"),
    re.compile(r"shorts/([0-9A-Za-z_-]{11})"),
]


def extract_video_id(url: str) -> Optional[str]:
    """Extract the video ID from a YouTube URL."""
    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def resolve_source_ref(video_url: str, video_id: Optional[str] = None) -> str:
    """Cache key of a video: explicit id, else the id in the URL, else the URL."""
    if video_id and video_id.strip():
        return video_id.strip()
    return extract_video_id(video_url) or video_url.strip()


def to_content(summary: SummaryModel) -> SummaryContent:
    return SummaryContent(
        title=summary.title,
        key_points=list(summary.key_points or []),
        full_summary=summary.full_summary,
    )


def to_list_item(summary: SummaryModel) -> SummaryListItem:
    return SummaryListItem(
        id=summary.id,
        video_url=summary.video_url,
        video_id=summary.video_id,
        title=summary.title,
        key_points=list(summary.key_points or []),
        full_summary=summary.full_summary,
        created_at=summary.created_at,
    )


def to_detail(summary: SummaryModel) -> SummaryDetail:
    return SummaryDetail(
        **to_list_item(summary).model_dump(),
        transcript=summary.transcript or "",
    )


class SummaryService:
    """
    Orchestrates summary generation, persistence and retrieval.

    The credit ledger and both repositories share one session, so the credit
    decrement and the summary insert commit or roll back together.
    """

    def __init__(
        self,
        summarization_service: SummarizationService,
        summary_repository: SummaryRepository,
        credit_ledger: CreditLedger,
        user_repository: UserRepository,
    ):
        self.summarization_service = summarization_service
        self.summary_repository = summary_repository
        self.credit_ledger = credit_ledger
        self.user_repository = user_repository

    async def generate(self, user_id: uuid.UUID, request: GenerateSummaryRequest) -> GenerateSummaryResult:
        """
        Generate (or reuse) a summary for a video transcript.

        A summary already stored for the same source, by any user, is
        returned as is: no credit is spent and nothing is written.

        Args:
            user_id: The authenticated user.
            request: Video reference, title and transcript.

        Returns:
            GenerateSummaryResult with the remaining credit balance.

        Raises:
            BadRequestError: If the transcript is blank.
            InsufficientCreditsError: If the user cannot pay for a generation.
            UpstreamServiceError: If the LLM call failed or timed out.
            InternalServerError: If the summary could not be stored.
        """
        source_ref = resolve_source_ref(request.video_url, request.video_id)
        logger.info(f"Generate request from user {user_id} for source {source_ref}")

        cached = await self.summary_repository.find_by_source(source_ref)
        if cached is not None:
            logger.info(f"Cache hit for source {source_ref} (summary {cached.id})")
            content = to_content(cached)
            return GenerateSummaryResult(
                **content.model_dump(),
                summary_id=cached.id if cached.user_id == user_id else None,
                cached=True,
                credits_remaining=await self.credit_ledger.balance(user_id),
            )

        await self.credit_ledger.require_credit(user_id)

        outcome = await self.summarization_service.generate(
            request.transcript,
            VideoContext(title=request.title, video_id=request.video_id, url=request.video_url),
        )
        if not outcome.ok:
            logger.error(f"Summarization failed for source {source_ref}: {outcome.error}")
            raise UpstreamServiceError("Summary generation failed. Please try again.")

        content = outcome.value
        try:
            remaining = await self.credit_ledger.decrement(user_id)
            summary = await self.summary_repository.create(
                SummaryModel(
                    user_id=user_id,
                    video_url=request.video_url,
                    video_id=request.video_id or extract_video_id(request.video_url),
                    source_ref=source_ref,
                    generated=True,
                    transcript=request.transcript,
                    title=content.title,
                    key_points=list(content.key_points),
                    full_summary=content.full_summary,
                )
            )
        except InsufficientCreditsError:
            # Another request spent the last credit while we were generating
            await self.summary_repository.rollback()
            raise
        except SQLAlchemyError as e:
            await self.summary_repository.rollback()
            logger.error(f"Failed to store summary for user {user_id}, credit not charged: {e}")
            raise InternalServerError("Failed to save summary.")

        logger.info(f"Stored summary {summary.id} for user {user_id}; {remaining} credits left")
        return GenerateSummaryResult(
            **content.model_dump(),
            summary_id=summary.id,
            cached=False,
            credits_remaining=remaining,
        )

    async def save(self, user_id: uuid.UUID, request: SaveSummaryRequest) -> SummaryDetail:
        """
        Store a summary the client already has. No LLM call, no charge.

        Saved summaries are private to their owner and never served from the
        cache to other users.

        Raises:
            NotFoundError: If the caller has no local user record.
            InternalServerError: If the summary could not be stored.
        """
        if await self.user_repository.get(user_id) is None:
            logger.warning(f"Refusing to save a summary for unknown user {user_id}")
            raise NotFoundError("User")

        if isinstance(request.summary, str):
            content = parse_flattened_summary(request.summary)
        else:
            content = request.summary

        try:
            summary = await self.summary_repository.create(
                SummaryModel(
                    user_id=user_id,
                    video_url=request.video_url,
                    video_id=request.video_id or extract_video_id(request.video_url),
                    source_ref=resolve_source_ref(request.video_url, request.video_id),
                    transcript=request.transcript or "",
                    title=content.title,
                    key_points=list(content.key_points),
                    full_summary=content.full_summary,
                )
            )
        except SQLAlchemyError as e:
            await self.summary_repository.rollback()
            logger.error(f"Failed to save summary for user {user_id}: {e}")
            raise InternalServerError("Failed to create summary.")

        logger.info(f"Saved summary {summary.id} for user {user_id}")
        return to_detail(summary)

    async def list_summaries(self, user_id: uuid.UUID, page: int, page_size: int) -> SummaryPage:
        summaries, total = await self.summary_repository.list_by_owner(user_id, page, page_size)
        return SummaryPage(
            items=[to_list_item(s) for s in summaries],
            total=total,
            page=page,
            page_size=page_size,
        )

    async def get_summary(self, summary_id: uuid.UUID, user_id: uuid.UUID) -> SummaryDetail:
        summary = await self.summary_repository.get_by_id(summary_id, user_id)
        if summary is None:
            logger.warning(f"Summary {summary_id} not found for user {user_id}")
            raise NotFoundError("Summary")
        return to_detail(summary)

    async def delete_summary(self, summary_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Delete a summary if it exists and belongs to the user."""
        summary = await self.summary_repository.get_by_id(summary_id, user_id)
        if summary is None:
            logger.warning(f"Summary {summary_id} not found for deletion by user {user_id}")
            raise NotFoundError("Summary")

        await self.summary_repository.delete(summary)
        logger.info(f"Summary {summary_id} deleted by user {user_id}")
