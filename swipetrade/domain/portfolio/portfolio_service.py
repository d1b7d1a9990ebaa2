from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from swipetrade.commons.errors import StoreConflict, StoreUnavailable
from swipetrade.domain.portfolio.dtos.portfolio_dto import PortfolioDTO
from swipetrade.domain.portfolio.dtos.summary_dto import PortfolioSummaryDTO
from swipetrade.domain.portfolio.dtos.watchlist_dto import WatchlistDTO
from swipetrade.domain.tokens.dtos.token_dto import TokenDTO
from swipetrade.domain.trading.dtos.trade_dto import ActivityDTO
from swipetrade.infrastructure.database.store_base import RecordStore

logger = logging.getLogger(__name__)


class PortfolioService:
    """
    Read side of the portfolio screen plus watchlist edits.

    Reads degrade to empty records when the store is down. Watchlist edits
    are idempotent read-modify-write cycles retried on version conflicts.
    """

    def __init__(self, store: RecordStore, max_write_attempts: int = 3):
        self.store = store
        self.max_write_attempts = max_write_attempts

    # ------------------ READS ------------------

    async def get_portfolio(self, account: str) -> PortfolioDTO:
        try:
            return await self.store.get_portfolio(account)
        except StoreUnavailable as e:
            logger.warning(f"Portfolio unavailable for {account}, showing empty: {e}")
            return PortfolioDTO(account=account)

    async def get_watchlist(self, account: str) -> WatchlistDTO:
        try:
            return await self.store.get_watchlist(account)
        except StoreUnavailable as e:
            logger.warning(f"Watchlist unavailable for {account}, showing empty: {e}")
            return WatchlistDTO(account=account)

    async def list_activity(self, account: str, limit: int = 10) -> List[ActivityDTO]:
        try:
            return await self.store.list_activity(account, limit)
        except StoreUnavailable as e:
            logger.warning(f"Activity unavailable for {account}: {e}")
            return []

    async def get_summary(self, account: str, activity_limit: int = 10) -> PortfolioSummaryDTO:
        portfolio = await self.get_portfolio(account)
        total = self.compute_portfolio_value(portfolio)
        return PortfolioSummaryDTO(
            portfolio=portfolio,
            total_value_usd=total,
            total_value_display=f"${self.format_balance(total)}",
            recent_activity=await self.list_activity(account, activity_limit),
        )

    # ------------------ WATCHLIST ------------------

    async def add_to_watchlist(self, account: str, token: TokenDTO) -> bool:
        """Add token; already present counts as success."""

        def _add(watchlist: WatchlistDTO) -> Optional[WatchlistDTO]:
            if watchlist.contains(token.address):
                return None
            return watchlist.model_copy(update={"tokens": [*watchlist.tokens, token]})

        ok = await self._update_watchlist(account, _add)
        if ok:
            logger.info(f"Added {token.symbol} to watchlist for {account}")
        return ok

    async def remove_from_watchlist(self, account: str, token_address: str) -> bool:
        """Remove token; absent counts as success."""

        def _remove(watchlist: WatchlistDTO) -> Optional[WatchlistDTO]:
            if not watchlist.contains(token_address):
                return None
            return watchlist.model_copy(
                update={"tokens": [t for t in watchlist.tokens if t.address != token_address]}
            )

        ok = await self._update_watchlist(account, _remove)
        if ok:
            logger.info(f"Removed token {token_address} from watchlist for {account}")
        return ok

    async def _update_watchlist(
        self,
        account: str,
        mutate: Callable[[WatchlistDTO], Optional[WatchlistDTO]],
    ) -> bool:
        for attempt in range(1, self.max_write_attempts + 1):
            try:
                watchlist = await self.store.get_watchlist(account)
                updated = mutate(watchlist)
                if updated is None:
                    return True

                updated.last_updated = datetime.now(timezone.utc)
                await self.store.put_watchlist(updated)
                return True

            except StoreConflict as e:
                logger.warning(
                    f"Watchlist write conflict for {account} "
                    f"(attempt {attempt}/{self.max_write_attempts}): {e}")
            except StoreUnavailable as e:
                logger.error(f"Failed to update watchlist for {account}: {e}")
                return False

        logger.error(f"Giving up on watchlist update for {account} after repeated conflicts")
        return False

    # ------------------ DISPLAY ------------------

    @staticmethod
    def compute_portfolio_value(portfolio: PortfolioDTO) -> float:
        """Sum of held_value_usd. Uses last trade prices, not live quotes."""
        return sum(entry.held_value_usd or 0.0 for entry in portfolio.tokens)

    @staticmethod
    def format_balance(amount: float, decimals: int = 2) -> str:
        # Small non-zero balances would otherwise render as 0.00.
        if amount < 0.01:
            return f"{amount:.8f}"
        return f"{amount:.{decimals}f}"
