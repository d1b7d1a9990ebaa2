from datetime import datetime, timezone
from typing import Dict, List
from uuid import uuid4

from swipetrade.commons.errors import StoreConflict
from swipetrade.domain.users.dtos.user_dto import UserDTO
from swipetrade.domain.portfolio.dtos.portfolio_dto import PortfolioDTO
from swipetrade.domain.portfolio.dtos.watchlist_dto import WatchlistDTO
from swipetrade.domain.trading.dtos.trade_dto import ActivityDTO
from swipetrade.infrastructure.database.store_base import RecordStore


class InMemoryRecordStore(RecordStore):
    """
    Process-local store with the same semantics as SqlRecordStore:
    - default records on first get
    - compare-and-swap on portfolio/watchlist version
    - insert-only activity log, listed newest first

    Every read hands out a copy; nothing is shared with callers.
    """

    def __init__(self, default_trade_amount: float = 0.001):
        self.default_trade_amount = default_trade_amount
        self._users: Dict[str, UserDTO] = {}
        self._portfolios: Dict[str, PortfolioDTO] = {}
        self._watchlists: Dict[str, WatchlistDTO] = {}
        self._activities: List[ActivityDTO] = []

    # ---------------------------------------------------------------------
    # Users
    # ---------------------------------------------------------------------
    async def get_user(self, account: str) -> UserDTO:
        if account not in self._users:
            self._users[account] = UserDTO(
                account=account,
                default_trade_amount=self.default_trade_amount,
            )
        return self._users[account].model_copy(deep=True)

    async def put_user(self, user: UserDTO) -> UserDTO:
        self._users[user.account] = user.model_copy(deep=True)
        return user

    # ---------------------------------------------------------------------
    # Portfolio / Watchlist
    # ---------------------------------------------------------------------
    async def get_portfolio(self, account: str) -> PortfolioDTO:
        if account not in self._portfolios:
            self._portfolios[account] = PortfolioDTO(account=account)
        return self._portfolios[account].model_copy(deep=True)

    async def put_portfolio(self, portfolio: PortfolioDTO) -> PortfolioDTO:
        self._check_version("portfolio", self._portfolios.get(portfolio.account), portfolio.version)
        stored = portfolio.model_copy(update={"version": portfolio.version + 1}, deep=True)
        self._portfolios[portfolio.account] = stored
        return stored.model_copy(deep=True)

    async def get_watchlist(self, account: str) -> WatchlistDTO:
        if account not in self._watchlists:
            self._watchlists[account] = WatchlistDTO(account=account)
        return self._watchlists[account].model_copy(deep=True)

    async def put_watchlist(self, watchlist: WatchlistDTO) -> WatchlistDTO:
        self._check_version("watchlist", self._watchlists.get(watchlist.account), watchlist.version)
        stored = watchlist.model_copy(update={"version": watchlist.version + 1}, deep=True)
        self._watchlists[watchlist.account] = stored
        return stored.model_copy(deep=True)

    @staticmethod
    def _check_version(record_name: str, current, expected_version: int) -> None:
        current_version = current.version if current is not None else 0
        if current_version != expected_version:
            raise StoreConflict(
                f"{record_name} changed: stored version {current_version}, "
                f"write based on {expected_version}"
            )

    # ---------------------------------------------------------------------
    # Activity
    # ---------------------------------------------------------------------
    async def append_activity(self, entry: ActivityDTO) -> ActivityDTO:
        stored = entry.model_copy(
            update={
                "id": entry.id or str(uuid4()),
                "created_at": entry.created_at or datetime.now(timezone.utc),
            }
        )
        if any(a.id == stored.id for a in self._activities):
            raise StoreConflict(f"Activity {stored.id} already exists")

        self._activities.append(stored)
        return stored.model_copy(deep=True)

    async def list_activity(self, account: str, limit: int = 10) -> List[ActivityDTO]:
        # Stable sort keeps insertion order for equal timestamps; newest first.
        mine = [a for a in reversed(self._activities) if a.account == account]
        mine.sort(key=lambda a: a.created_at, reverse=True)
        return [a.model_copy(deep=True) for a in mine[:limit]]

    async def health_check(self) -> bool:
        return True
