from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError
from unittest.mock import AsyncMock, MagicMock

from swipetrade.commons.errors import StoreConflict
from swipetrade.domain.portfolio.dtos.portfolio_dto import PortfolioDTO, PortfolioEntryDTO
from swipetrade.domain.tokens.dtos.token_dto import TokenDTO
from swipetrade.infrastructure.database.models.portfolio_model import PortfolioModel
from swipetrade.infrastructure.database.repositories.portfolio_repository import PortfolioRepository
from swipetrade.infrastructure.database.repositories.watchlist_repository import WatchlistRepository


ACCOUNT = "wallet-1"
NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
RAY = TokenDTO(address="RayMint", name="Raydium", symbol="RAY", price=10.0)


def update_result(rowcount: int) -> MagicMock:
    result = MagicMock()
    result.rowcount = rowcount
    return result


def select_result(row) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    return result


def stored_row(version: int, tokens=None) -> SimpleNamespace:
    return SimpleNamespace(
        account=ACCOUNT, tokens=tokens or [], last_updated=NOW, version=version)


@pytest.fixture
def session():
    """Mock de AsyncSession: execute/commit/rollback/refresh async, add sync."""
    s = MagicMock()
    s.execute = AsyncMock()
    s.commit = AsyncMock()
    s.rollback = AsyncMock()
    s.refresh = AsyncMock()
    return s


def portfolio(version: int) -> PortfolioDTO:
    return PortfolioDTO(
        account=ACCOUNT,
        tokens=[PortfolioEntryDTO.from_token(RAY, held_amount=2.0, held_value_usd=20.0)],
        last_updated=NOW,
        version=version,
    )


# ==================== SAVE (COMPARE-AND-SWAP) ====================


@pytest.mark.asyncio
async def test_save_updates_only_the_version_that_was_read(session):
    session.execute.return_value = update_result(1)

    saved = await PortfolioRepository(session).save(portfolio(version=2))

    assert saved.version == 3
    session.commit.assert_awaited_once()
    session.add.assert_not_called()

    stmt = session.execute.await_args.args[0]
    params = stmt.compile().params
    assert params["version"] == 3
    assert [v for k, v in params.items() if k.startswith("version_")] == [2]
    assert params["tokens"][0]["address"] == "RayMint"


@pytest.mark.asyncio
async def test_save_on_stale_version_raises_conflict(session):
    session.execute.side_effect = [update_result(0), select_result(stored_row(version=5))]

    with pytest.raises(StoreConflict):
        await PortfolioRepository(session).save(portfolio(version=2))

    session.rollback.assert_awaited_once()
    session.commit.assert_not_called()
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_save_inserts_when_no_row_exists(session):
    session.execute.side_effect = [update_result(0), select_result(None)]

    saved = await PortfolioRepository(session).save(portfolio(version=0))

    assert saved.version == 1
    inserted = session.add.call_args.args[0]
    assert isinstance(inserted, PortfolioModel)
    assert inserted.version == 1
    assert inserted.tokens[0]["held_amount"] == 2.0
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_save_concurrent_insert_becomes_conflict(session):
    session.execute.side_effect = [update_result(0), select_result(None)]
    session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(StoreConflict):
        await WatchlistRepository(session).save(
            WatchlistRepository.dto(account=ACCOUNT, tokens=[RAY], version=0))

    session.rollback.assert_awaited_once()


# ==================== ENSURE DEFAULT ====================


@pytest.mark.asyncio
async def test_ensure_default_returns_existing_row(session):
    session.execute.return_value = select_result(stored_row(version=4, tokens=[RAY.model_dump()]))

    watchlist = await WatchlistRepository(session).ensure_default(ACCOUNT)

    assert watchlist.version == 4
    assert watchlist.contains("RayMint")
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_ensure_default_creates_empty_record(session):
    session.execute.return_value = select_result(None)

    created = await PortfolioRepository(session).ensure_default(ACCOUNT)

    assert created.account == ACCOUNT
    assert created.tokens == []
    assert created.version == 0
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_ensure_default_race_rereads_winner(session):
    session.execute.side_effect = [select_result(None), select_result(stored_row(version=1))]
    session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    portfolio_dto = await PortfolioRepository(session).ensure_default(ACCOUNT)

    assert portfolio_dto.version == 1
    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_ensure_default_race_without_winner_propagates(session):
    session.execute.side_effect = [select_result(None), select_result(None)]
    session.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(IntegrityError):
        await PortfolioRepository(session).ensure_default(ACCOUNT)
