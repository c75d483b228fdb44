"""
Credit ledger: the per-user generation balance.
"""
import uuid

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from recap.core.exceptions import InsufficientCreditsError, InternalServerError
from recap.repositories.users import UserRepository


class CreditLedger:
    """
    Checks and spends user credits.

    ``require_credit`` is only a fast pre-check that avoids paying for an LLM
    call the user cannot afford. The authoritative check is ``decrement``,
    a conditional UPDATE that fails instead of going below zero.
    """

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    async def require_credit(self, user_id: uuid.UUID) -> int:
        """
        Ensure the user has at least one credit.

        The read transaction is ended before returning, so no connection is
        held while the caller waits on the model.

        Returns:
            The current balance.

        Raises:
            InsufficientCreditsError: If the balance is below one or the user
                has no local record.
            InternalServerError: If the balance could not be read. The check
                is never skipped.
        """
        try:
            balance = await self.user_repository.get_credits(user_id)
            await self.user_repository.commit()
        except SQLAlchemyError as e:
            await self.user_repository.rollback()
            logger.error(f"Credit check failed for user {user_id}: {e}")
            raise InternalServerError("Failed to check credits.")

        if balance is None or balance < 1:
            logger.warning(f"User {user_id} has insufficient credits (balance={balance})")
            raise InsufficientCreditsError()
        return balance

    async def balance(self, user_id: uuid.UUID) -> int:
        return await self.user_repository.get_credits(user_id) or 0

    async def decrement(self, user_id: uuid.UUID) -> int:
        """
        Spend one credit without committing.

        The caller commits together with whatever the credit paid for, or
        rolls back to give it back.

        Returns:
            The remaining balance.

        Raises:
            InsufficientCreditsError: If no credit was left to spend.
        """
        remaining = await self.user_repository.decrement_credits(user_id, commit=False)
        if remaining is None:
            logger.warning(f"Credit decrement for user {user_id} matched no row")
            raise InsufficientCreditsError()
        return remaining
