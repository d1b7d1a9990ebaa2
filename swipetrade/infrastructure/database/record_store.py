import asyncio
import logging
from typing import Awaitable, Callable, List, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from swipetrade.commons.errors import StoreConflict, StoreUnavailable
from swipetrade.domain.users.dtos.user_dto import UserDTO
from swipetrade.domain.portfolio.dtos.portfolio_dto import PortfolioDTO
from swipetrade.domain.portfolio.dtos.watchlist_dto import WatchlistDTO
from swipetrade.domain.trading.dtos.trade_dto import ActivityDTO
from swipetrade.infrastructure.database.client import PostgresClient
from swipetrade.infrastructure.database.store_base import RecordStore
from swipetrade.infrastructure.database.repositories.user_repository import UserRepository
from swipetrade.infrastructure.database.repositories.portfolio_repository import PortfolioRepository
from swipetrade.infrastructure.database.repositories.watchlist_repository import WatchlistRepository
from swipetrade.infrastructure.database.repositories.activity_repository import ActivityRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlRecordStore(RecordStore):
    """
    RecordStore over PostgreSQL.
    Opens one session per call and bounds every call with a timeout.
    """

    def __init__(
        self,
        db_client: PostgresClient,
        default_trade_amount: float = 0.001,
        timeout: float = 5.0,
    ):
        self.db_client = db_client
        self.default_trade_amount = default_trade_amount
        self.timeout = timeout

    async def _run(self, operation: str, fn: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async def _call() -> T:
            async with self.db_client.get_session() as session:
                return await fn(session)

        try:
            return await asyncio.wait_for(_call(), timeout=self.timeout)
        except StoreConflict:
            raise
        except IntegrityError as e:
            logger.warning(f"Store conflict during {operation}: {e}")
            raise StoreConflict(f"{operation} conflicted: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Store timeout during {operation} after {self.timeout}s")
            raise StoreUnavailable(f"{operation} timed out") from e
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Store unavailable during {operation}: {e}")
            raise StoreUnavailable(f"{operation} failed: {e}") from e

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    async def get_user(self, account: str) -> UserDTO:
        return await self._run(
            "get_user",
            lambda s: UserRepository(s).ensure_default(
                account, self.default_trade_amount),
        )

    async def put_user(self, user: UserDTO) -> UserDTO:
        return await self._run("put_user", lambda s: UserRepository(s).save(user))

    # ------------------------------------------------------------------
    # Portfolio / Watchlist
    # ------------------------------------------------------------------
    async def get_portfolio(self, account: str) -> PortfolioDTO:
        return await self._run(
            "get_portfolio", lambda s: PortfolioRepository(s).ensure_default(account))

    async def put_portfolio(self, portfolio: PortfolioDTO) -> PortfolioDTO:
        return await self._run(
            "put_portfolio", lambda s: PortfolioRepository(s).save(portfolio))

    async def get_watchlist(self, account: str) -> WatchlistDTO:
        return await self._run(
            "get_watchlist", lambda s: WatchlistRepository(s).ensure_default(account))

    async def put_watchlist(self, watchlist: WatchlistDTO) -> WatchlistDTO:
        return await self._run(
            "put_watchlist", lambda s: WatchlistRepository(s).save(watchlist))

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------
    async def append_activity(self, entry: ActivityDTO) -> ActivityDTO:
        return await self._run(
            "append_activity", lambda s: ActivityRepository(s).add(entry))

    async def list_activity(self, account: str, limit: int = 10) -> List[ActivityDTO]:
        return await self._run(
            "list_activity",
            lambda s: ActivityRepository(s).list_for_account(account, limit),
        )

    async def health_check(self) -> bool:
        return await self.db_client.health_check()
