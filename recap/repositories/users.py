"""
Repository layer for managing User data, including the credit balance.
"""
import uuid
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from recap.models.sql import User


class UserRepository:
    """
    Repository layer for managing User records.

    Methods that take ``commit`` leave the transaction open when it is False,
    so a caller can combine them with other writes on the same session.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> Optional[User]:
        query = select(User).where(User.id == user_id)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def get_by_email(self, email: str) -> Optional[User]:
        query = select(User).where(User.email == email)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def create(self, user: User) -> User:
        """
        Saves a new user to the database.

        Raises:
            sqlalchemy.exc.IntegrityError: If the id or email is already taken.
        """
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def update(self, user: User) -> User:
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def get_credits(self, user_id: uuid.UUID) -> Optional[int]:
        """Returns the current balance, or None if the user does not exist."""
        query = select(User.credits).where(User.id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def decrement_credits(self, user_id: uuid.UUID, commit: bool = False) -> Optional[int]:
        """
        Takes one credit in a single conditional UPDATE.

        The row only matches while ``credits >= 1``, so concurrent callers
        can never push the balance below zero.

        Args:
            user_id: The user to charge.
            commit: Commit immediately instead of leaving it to the caller.

        Returns:
            The remaining balance, or None if there was no credit to take.
        """
        query = (
            update(User)
            .where(User.id == user_id, User.credits >= 1)
            .values(credits=User.credits - 1)
            .returning(User.credits)
        )
        result = await self.db.execute(query)
        remaining = result.scalar_one_or_none()
        if commit:
            await self.db.commit()
        return remaining

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
