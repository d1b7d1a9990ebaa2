import math

import pytest
from unittest.mock import AsyncMock

from swipetrade.commons.errors import InvalidInput, StoreUnavailable
from swipetrade.domain.users.users_service import UsersService
from swipetrade.infrastructure.database.memory_store import InMemoryRecordStore


ACCOUNT = "wallet-1"


@pytest.fixture
def store():
    return InMemoryRecordStore(default_trade_amount=0.001)


@pytest.fixture
def users_service(store):
    return UsersService(store=store, fallback_trade_amount=0.001)


@pytest.mark.asyncio
async def test_get_user_creates_default_record(users_service):
    user = await users_service.get_user(ACCOUNT)

    assert user.account == ACCOUNT
    assert user.default_trade_amount == 0.001
    assert user.email is None


@pytest.mark.asyncio
async def test_get_user_rejects_empty_account(users_service):
    with pytest.raises(InvalidInput):
        await users_service.get_user("")


@pytest.mark.asyncio
async def test_update_default_amount_persists(users_service):
    saved = await users_service.update_default_amount(ACCOUNT, 0.05)

    assert saved.default_trade_amount == 0.05
    assert await users_service.get_default_amount(ACCOUNT) == 0.05


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -1.0, math.nan, math.inf])
async def test_update_default_amount_rejects_invalid(users_service, store, amount):
    with pytest.raises(InvalidInput):
        await users_service.update_default_amount(ACCOUNT, amount)

    assert (await store.get_user(ACCOUNT)).default_trade_amount == 0.001


@pytest.mark.asyncio
async def test_default_amount_falls_back_when_store_down(store):
    store.get_user = AsyncMock(side_effect=StoreUnavailable("down"))
    users_service = UsersService(store=store, fallback_trade_amount=0.002)

    assert await users_service.get_default_amount(ACCOUNT) == 0.002


@pytest.mark.asyncio
async def test_update_default_amount_propagates_store_errors(store, users_service):
    store.put_user = AsyncMock(side_effect=StoreUnavailable("down"))

    with pytest.raises(StoreUnavailable):
        await users_service.update_default_amount(ACCOUNT, 0.01)


@pytest.mark.asyncio
async def test_get_user_degrades_to_default_when_store_down(store):
    store.get_user = AsyncMock(side_effect=StoreUnavailable("down"))
    users_service = UsersService(store=store, fallback_trade_amount=0.002)

    user = await users_service.get_user(ACCOUNT)

    assert user.account == ACCOUNT
    assert user.default_trade_amount == 0.002


@pytest.mark.asyncio
async def test_update_default_amount_does_not_write_over_degraded_read(store, users_service):
    store.get_user = AsyncMock(side_effect=StoreUnavailable("down"))
    store.put_user = AsyncMock()

    with pytest.raises(StoreUnavailable):
        await users_service.update_default_amount(ACCOUNT, 0.01)

    store.put_user.assert_not_called()
