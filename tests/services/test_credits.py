import uuid

import pytest
from unittest.mock import AsyncMock
from sqlalchemy.exc import IntegrityError, OperationalError

from recap.core.exceptions import InsufficientCreditsError, InternalServerError
from recap.core.providers.identity_provider import IdentityClaims
from recap.models.sql import User
from recap.repositories.users import UserRepository
from recap.services.credits import CreditLedger
from recap.services.directory import UserDirectory


@pytest.fixture
def user_repository():
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def claims():
    return IdentityClaims(
        id=uuid.uuid4(),
        email="ada@example.com",
        name="Ada",
        image_url="https://img.example.com/ada.png",
        provider="google",
    )


# --- CreditLedger ---

@pytest.mark.asyncio
@pytest.mark.parametrize("balance", [0, None])
async def test_require_credit_rejects_empty_balance(user_repository, balance):
    user_repository.get_credits.return_value = balance

    with pytest.raises(InsufficientCreditsError):
        await CreditLedger(user_repository).require_credit(uuid.uuid4())


@pytest.mark.asyncio
async def test_require_credit_returns_balance(user_repository):
    user_repository.get_credits.return_value = 3

    assert await CreditLedger(user_repository).require_credit(uuid.uuid4()) == 3


@pytest.mark.asyncio
async def test_require_credit_ends_read_transaction(user_repository):
    user_repository.get_credits.return_value = 3

    await CreditLedger(user_repository).require_credit(uuid.uuid4())

    user_repository.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_require_credit_store_failure_blocks(user_repository):
    user_repository.get_credits.side_effect = OperationalError("select", {}, Exception("database is down"))

    with pytest.raises(InternalServerError):
        await CreditLedger(user_repository).require_credit(uuid.uuid4())

    user_repository.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_decrement_does_not_commit(user_repository):
    user_id = uuid.uuid4()
    user_repository.decrement_credits.return_value = 2

    assert await CreditLedger(user_repository).decrement(user_id) == 2
    user_repository.decrement_credits.assert_awaited_once_with(user_id, commit=False)


@pytest.mark.asyncio
async def test_decrement_without_credit_raises(user_repository):
    user_repository.decrement_credits.return_value = None

    with pytest.raises(InsufficientCreditsError):
        await CreditLedger(user_repository).decrement(uuid.uuid4())


@pytest.mark.asyncio
async def test_balance_of_unknown_user_is_zero(user_repository):
    user_repository.get_credits.return_value = None

    assert await CreditLedger(user_repository).balance(uuid.uuid4()) == 0


# --- UserDirectory ---

@pytest.mark.asyncio
async def test_sync_creates_user_with_initial_credits(user_repository, claims):
    user_repository.get.return_value = None
    user_repository.create.side_effect = lambda user: user

    user = await UserDirectory(user_repository, initial_credits=10).sync(claims)

    assert user.id == claims.id
    assert user.credits == 10
    assert user.provider == "google"
    assert user.image_url == claims.image_url


@pytest.mark.asyncio
async def test_sync_updates_profile_and_keeps_credits(user_repository, claims):
    existing = User(id=claims.id, email="old@example.com", name="Old", provider="google", credits=4)
    user_repository.get.return_value = existing
    user_repository.update.side_effect = lambda user: user

    user = await UserDirectory(user_repository, initial_credits=10).sync(claims)

    assert user.email == "ada@example.com"
    assert user.name == "Ada"
    assert user.credits == 4
    user_repository.create.assert_not_called()


@pytest.mark.asyncio
async def test_sync_without_changes_does_not_write(user_repository, claims):
    existing = User(
        id=claims.id,
        email=claims.email,
        name=claims.name,
        image_url=claims.image_url,
        provider=claims.provider,
        credits=4,
    )
    user_repository.get.return_value = existing

    await UserDirectory(user_repository, initial_credits=10).sync(claims)

    user_repository.update.assert_not_called()


@pytest.mark.asyncio
async def test_sync_missing_profile_fields_keep_stored_values(user_repository, claims):
    existing = User(id=claims.id, email=claims.email, name="Stored", image_url="https://x/y.png", provider="google", credits=1)
    user_repository.get.return_value = existing
    bare = IdentityClaims(id=claims.id, email=claims.email)

    user = await UserDirectory(user_repository, initial_credits=10).sync(bare)

    assert user.name == "Stored"
    assert user.image_url == "https://x/y.png"
    user_repository.update.assert_not_called()


@pytest.mark.asyncio
async def test_sync_concurrent_create_falls_back_to_update(user_repository, claims):
    existing = User(id=claims.id, email=claims.email, name="Other", provider="google", credits=10)
    user_repository.get.side_effect = [None, existing]
    user_repository.create.side_effect = IntegrityError("insert", {}, Exception("duplicate key"))
    user_repository.update.side_effect = lambda user: user

    user = await UserDirectory(user_repository, initial_credits=10).sync(claims)

    assert user is existing
    assert user.name == "Ada"
    user_repository.rollback.assert_awaited()


@pytest.mark.asyncio
async def test_sync_store_failure_propagates(user_repository, claims):
    user_repository.get.side_effect = OperationalError("select", {}, Exception("database is down"))

    with pytest.raises(OperationalError):
        await UserDirectory(user_repository, initial_credits=10).sync(claims)

    user_repository.rollback.assert_awaited()
