"""
Auth gate and account routes.

``current_user`` is the dependency every protected route declares: it
verifies the bearer token, mirrors the identity into the users table, and
returns the CurrentUser attached to the request.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from recap.api.dependencies import get_account_service, get_identity_verifier, get_user_directory
from recap.core.exceptions import AuthenticationError
from recap.core.providers.identity_provider import IdentityVerifier
from recap.models import AuthToken, CurrentUser, Envelope, SignInRequest, SignUpRequest, UserProfile
from recap.services.accounts import AccountService
from recap.services.directory import UserDirectory

bearer_scheme = HTTPBearer(auto_error=False)


async def current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
    directory: UserDirectory = Depends(get_user_directory),
) -> CurrentUser:
    """
    Resolve the caller from ``Authorization: Bearer <token>``.

    A failing user directory does not fail authentication: the identity is
    then built from the token claims alone.

    Raises:
        AuthenticationError: If the header is missing or malformed, or the
            token is rejected by the identity verifier.
    """
    if credentials is None:
        raise AuthenticationError("Missing or invalid Authorization header")

    claims = await verifier.verify(credentials.credentials)
    if claims is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        user = await directory.sync(claims)
    except SQLAlchemyError as e:
        logger.warning(f"User directory sync failed for {claims.id}, continuing with token claims: {e}")
        identity = CurrentUser(
            id=claims.id,
            email=claims.email,
            name=claims.name or "",
            image=claims.image_url or "",
        )
    else:
        identity = CurrentUser(
            id=claims.id,
            email=claims.email,
            name=claims.name or user.name or "",
            image=claims.image_url or user.image_url or "",
        )

    request.state.user = identity
    return identity


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=Envelope[AuthToken], status_code=201)
async def sign_up(
    payload: SignUpRequest,
    account_service: AccountService = Depends(get_account_service),
):
    """
    Registers an email/password account with the initial credit grant.

    Returns:
        Envelope[AuthToken]: Access token and the new user's profile.
    """
    token = await account_service.sign_up(payload.name, payload.email, payload.password)
    return Envelope(data=token)


@router.post("/signin", response_model=Envelope[AuthToken])
async def sign_in(
    payload: SignInRequest,
    account_service: AccountService = Depends(get_account_service),
):
    """Exchanges email and password for an access token."""
    token = await account_service.sign_in(payload.email, payload.password)
    return Envelope(data=token)


@router.get("/me", response_model=Envelope[UserProfile])
async def read_profile(
    user: CurrentUser = Depends(current_user),
    account_service: AccountService = Depends(get_account_service),
):
    """Returns the authenticated user's profile, including the credit balance."""
    profile = await account_service.get_profile(user.id)
    return Envelope(data=profile)
