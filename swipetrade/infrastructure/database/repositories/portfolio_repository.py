from swipetrade.domain.portfolio.dtos.portfolio_dto import PortfolioDTO
from swipetrade.infrastructure.database.models.portfolio_model import PortfolioModel
from swipetrade.infrastructure.database.repositories.versioned_repository import (
    VersionedTokenListRepository,
)


class PortfolioRepository(VersionedTokenListRepository[PortfolioDTO]):
    model = PortfolioModel
    dto = PortfolioDTO
    record_name = "portfolio"
