"""
Email/password accounts: sign-up, sign-in and the profile lookup.
"""
import uuid

from fastapi_users.password import PasswordHelper
from loguru import logger
from sqlalchemy.exc import IntegrityError

from recap.core.constants import AuthConfig
from recap.core.exceptions import AuthenticationError, BadRequestError, NotFoundError
from recap.core.providers.local_tokens import LocalTokenAuthority
from recap.models import AuthToken, UserProfile
from recap.models.enums import AuthProvider
from recap.models.sql import User
from recap.repositories.users import UserRepository


def to_profile(user: User) -> UserProfile:
    return UserProfile(
        id=user.id,
        name=user.name,
        email=user.email,
        credits=user.credits,
        image_url=user.image_url,
        provider=user.provider,
        created_at=user.created_at,
    )


class AccountService:
    """Local accounts backed by the users table and locally issued tokens."""

    def __init__(
        self,
        user_repository: UserRepository,
        token_authority: LocalTokenAuthority,
        password_helper: PasswordHelper,
        initial_credits: int,
    ):
        self.user_repository = user_repository
        self.token_authority = token_authority
        self.password_helper = password_helper
        self.initial_credits = initial_credits

    async def sign_up(self, name: str, email: str, password: str) -> AuthToken:
        """
        Register a new email/password account.

        Raises:
            BadRequestError: If the password is too short or the email is taken.
        """
        if len(password) < AuthConfig.MIN_PASSWORD_LENGTH:
            raise BadRequestError(
                f"Password must be at least {AuthConfig.MIN_PASSWORD_LENGTH} characters"
            )

        email = email.lower()
        if await self.user_repository.get_by_email(email) is not None:
            raise BadRequestError("Email already in use")

        user = User(
            id=uuid.uuid4(),
            email=email,
            name=name,
            provider=AuthProvider.EMAIL.value,
            hashed_password=self.password_helper.hash(password),
            credits=self.initial_credits,
        )
        try:
            user = await self.user_repository.create(user)
        except IntegrityError:
            await self.user_repository.rollback()
            raise BadRequestError("Email already in use")

        logger.info(f"User {user.id} has registered.")
        return self._token_for(user)

    async def sign_in(self, email: str, password: str) -> AuthToken:
        """
        Exchange email and password for an access token.

        Raises:
            AuthenticationError: For an unknown email, an account without a
                password (identity-provider users) or a wrong password.
        """
        user = await self.user_repository.get_by_email(email.lower())
        if user is None or not user.hashed_password:
            raise AuthenticationError("Invalid credentials")

        verified, updated_hash = self.password_helper.verify_and_update(password, user.hashed_password)
        if not verified:
            logger.debug(f"Failed sign-in for user {user.id}")
            raise AuthenticationError("Invalid credentials")

        if updated_hash is not None:
            user.hashed_password = updated_hash
            user = await self.user_repository.update(user)

        logger.info(f"User {user.id} signed in")
        return self._token_for(user)

    async def get_profile(self, user_id: uuid.UUID) -> UserProfile:
        user = await self.user_repository.get(user_id)
        if user is None:
            raise NotFoundError("User")
        return to_profile(user)

    def _token_for(self, user: User) -> AuthToken:
        token = self.token_authority.issue(user.id, user.email, user.name)
        return AuthToken(token=token, token_type=AuthConfig.TOKEN_TYPE, user=to_profile(user))
