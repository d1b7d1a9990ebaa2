from swipetrade.domain.portfolio.dtos.watchlist_dto import WatchlistDTO
from swipetrade.infrastructure.database.models.watchlist_model import WatchlistModel
from swipetrade.infrastructure.database.repositories.versioned_repository import (
    VersionedTokenListRepository,
)


class WatchlistRepository(VersionedTokenListRepository[WatchlistDTO]):
    model = WatchlistModel
    dto = WatchlistDTO
    record_name = "watchlist"
