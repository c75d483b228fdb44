from typing import List, Optional, Tuple
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from recap.models.sql import SummaryModel


class SummaryRepository:
    """
    Repository layer for managing SummaryModel data.

    Every read that serves a user is filtered by owner in the query itself;
    only ``find_by_source`` looks across owners, for the global cache.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_source(self, source_ref: str) -> Optional[SummaryModel]:
        """
        Retrieves the most recent generated summary of a video, whoever owns it.

        Summaries stored through save carry client-supplied content and are
        never returned here.

        Args:
            source_ref: The cache key of the video.

        Returns:
            Optional[SummaryModel]: The latest summary for the source, if any.
        """
        query = (
            select(SummaryModel)
            .where(SummaryModel.source_ref == source_ref, SummaryModel.generated.is_(True))
            .order_by(SummaryModel.created_at.desc())
            .limit(1)
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    async def create(self, summary: SummaryModel) -> SummaryModel:
        """
        Saves a new summary and commits the session.

        Anything else pending on the session (a credit decrement) is
        committed in the same transaction.
        """
        self.db.add(summary)
        await self.db.commit()
        await self.db.refresh(summary)
        return summary

    async def list_by_owner(
        self, owner_id: uuid.UUID, page: int = 1, page_size: int = 20
    ) -> Tuple[List[SummaryModel], int]:
        """
        Retrieves one page of a user's summaries, newest first.

        Args:
            owner_id: The user ID to filter by.
            page: 1-based page number.
            page_size: Maximum number of records to return.

        Returns:
            The summaries of the page and the total count for the owner.
        """
        count_query = (
            select(func.count())
            .select_from(SummaryModel)
            .where(SummaryModel.user_id == owner_id)
        )
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            select(SummaryModel)
            .where(SummaryModel.user_id == owner_id)
            .order_by(SummaryModel.created_at.desc(), SummaryModel.id.desc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def get_by_id(self, summary_id: uuid.UUID, owner_id: uuid.UUID) -> Optional[SummaryModel]:
        """Retrieves a summary only if it belongs to ``owner_id``."""
        query = select(SummaryModel).where(
            SummaryModel.id == summary_id,
            SummaryModel.user_id == owner_id,
        )
        result = await self.db.execute(query)
        return result.scalars().first()

    async def delete(self, summary: SummaryModel) -> None:
        await self.db.delete(summary)
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
