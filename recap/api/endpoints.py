"""
API endpoints for summary generation and the user's summary history.
"""
import time
import uuid

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger

from recap.api.auth import current_user
from recap.api.dependencies import get_summary_service
from recap.core.constants import PaginationConfig, RateLimitConfig
from recap.core.limiter import limiter
from recap.models import (
    CurrentUser,
    DeletedSummary,
    Envelope,
    GenerateSummaryRequest,
    GenerateSummaryResult,
    SaveSummaryRequest,
    SummaryDetail,
    SummaryPage,
)
from recap.services.summaries import SummaryService

router = APIRouter(prefix="/summary", tags=["summary"])


@router.post("/generate", response_model=Envelope[GenerateSummaryResult])
@limiter.limit(RateLimitConfig.GENERATE)
async def generate_summary(
    request: Request,
    payload: GenerateSummaryRequest,
    summary_service: SummaryService = Depends(get_summary_service),
    user: CurrentUser = Depends(current_user),
):
    """
    Summarizes a video transcript, spending one credit.

    A video that was already summarized (by anyone) is answered from the
    stored summary without spending credit.

    Args:
        request: FastAPI request object (required for rate limiting).
        payload: Video URL/id, title and transcript.
        summary_service: The service handling the business logic.
        user: The authenticated user.

    Returns:
        Envelope[GenerateSummaryResult]: Title, key points, full summary and
        the remaining credit balance.
    """
    logger.info(f"Incoming generate request for {payload.video_url} from user {user.id}")

    start_time = time.perf_counter()
    result = await summary_service.generate(user.id, payload)
    duration = time.perf_counter() - start_time
    logger.info(f"Generate request completed in {duration:.2f}s (cached={result.cached})")
    return Envelope(data=result)


@router.post("/save", response_model=Envelope[SummaryDetail], status_code=201)
async def save_summary(
    payload: SaveSummaryRequest,
    summary_service: SummaryService = Depends(get_summary_service),
    user: CurrentUser = Depends(current_user),
):
    """Stores a summary produced earlier. Does not call the model or spend credit."""
    summary = await summary_service.save(user.id, payload)
    return Envelope(data=summary)


@router.get("", response_model=Envelope[SummaryPage])
async def list_summaries(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    page_size: int = Query(
        default=PaginationConfig.DEFAULT_PAGE_SIZE,
        ge=1,
        le=PaginationConfig.MAX_PAGE_SIZE,
        alias="pageSize",
        description=f"Results per page (1-{PaginationConfig.MAX_PAGE_SIZE})",
    ),
    summary_service: SummaryService = Depends(get_summary_service),
    user: CurrentUser = Depends(current_user),
):
    """Lists the authenticated user's summaries, newest first."""
    logger.info(f"Fetching summaries for user {user.id} (page={page}, page_size={page_size})")
    result = await summary_service.list_summaries(user.id, page, page_size)
    return Envelope(data=result)


@router.get("/{summary_id}", response_model=Envelope[SummaryDetail])
async def get_summary(
    summary_id: uuid.UUID,
    summary_service: SummaryService = Depends(get_summary_service),
    user: CurrentUser = Depends(current_user),
):
    """
    Retrieves one summary with its transcript.

    Summaries of other users answer exactly like missing ones (404).
    """
    summary = await summary_service.get_summary(summary_id, user.id)
    return Envelope(data=summary)


@router.delete("/{summary_id}", response_model=Envelope[DeletedSummary])
async def delete_summary(
    summary_id: uuid.UUID,
    summary_service: SummaryService = Depends(get_summary_service),
    user: CurrentUser = Depends(current_user),
):
    """Deletes one of the user's summaries."""
    logger.info(f"User {user.id} deleting summary {summary_id}")
    await summary_service.delete_summary(summary_id, user.id)
    return Envelope(data=DeletedSummary(id=summary_id))
