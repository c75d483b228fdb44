"""
User directory: keeps the local user table in step with the identity provider.
"""
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from loguru import logger

from recap.core.providers.identity_provider import IdentityClaims
from recap.models.enums import AuthProvider
from recap.models.sql import User
from recap.repositories.users import UserRepository


class UserDirectory:
    """Create-or-update of local user records from verified identity claims."""

    def __init__(self, user_repository: UserRepository, initial_credits: int):
        self.user_repository = user_repository
        self.initial_credits = initial_credits

    async def sync(self, claims: IdentityClaims) -> User:
        """
        Upsert the user described by ``claims``.

        New users get the initial credit grant. Existing users get their
        email and any profile field present in the claims updated; the credit
        balance is never touched here.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the store is unavailable. The
                session has been rolled back.
        """
        try:
            user = await self.user_repository.get(claims.id)
            if user is None:
                try:
                    return await self._create(claims)
                except IntegrityError:
                    # A concurrent request created the same user first
                    await self.user_repository.rollback()
                    user = await self.user_repository.get(claims.id)
                    if user is None:
                        raise
            return await self._update(user, claims)
        except SQLAlchemyError:
            await self.user_repository.rollback()
            raise

    async def _create(self, claims: IdentityClaims) -> User:
        user = User(
            id=claims.id,
            email=claims.email,
            name=claims.name,
            image_url=claims.image_url,
            provider=claims.provider or AuthProvider.OAUTH.value,
            credits=self.initial_credits,
        )
        user = await self.user_repository.create(user)
        logger.info(f"Created user {user.id} with {user.credits} credits")
        return user

    async def _update(self, user: User, claims: IdentityClaims) -> User:
        changed = False
        for field, value in (
            ("email", claims.email),
            ("name", claims.name),
            ("image_url", claims.image_url),
            ("provider", claims.provider),
        ):
            if value and getattr(user, field) != value:
                setattr(user, field, value)
                changed = True

        if not changed:
            return user
        logger.debug(f"Updated profile of user {user.id}")
        return await self.user_repository.update(user)
