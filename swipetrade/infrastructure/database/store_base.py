from typing import List, Protocol

from swipetrade.domain.users.dtos.user_dto import UserDTO
from swipetrade.domain.portfolio.dtos.portfolio_dto import PortfolioDTO
from swipetrade.domain.portfolio.dtos.watchlist_dto import WatchlistDTO
from swipetrade.domain.trading.dtos.trade_dto import ActivityDTO


class RecordStore(Protocol):
    """
    Typed access to the four record kinds, all keyed by account.

    get_* never returns None: a missing user/portfolio/watchlist is created
    with defaults first. Failures raise StoreUnavailable or StoreConflict.
    """

    async def get_user(self, account: str) -> UserDTO: ...
    async def put_user(self, user: UserDTO) -> UserDTO: ...

    async def get_portfolio(self, account: str) -> PortfolioDTO: ...
    async def put_portfolio(self, portfolio: PortfolioDTO) -> PortfolioDTO: ...

    async def get_watchlist(self, account: str) -> WatchlistDTO: ...
    async def put_watchlist(self, watchlist: WatchlistDTO) -> WatchlistDTO: ...

    async def append_activity(self, entry: ActivityDTO) -> ActivityDTO: ...
    async def list_activity(self, account: str, limit: int = 10) -> List[ActivityDTO]: ...

    async def health_check(self) -> bool: ...
