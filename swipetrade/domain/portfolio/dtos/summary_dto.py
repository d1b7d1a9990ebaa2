from typing import List

from pydantic import BaseModel

from swipetrade.domain.portfolio.dtos.portfolio_dto import PortfolioDTO
from swipetrade.domain.trading.dtos.trade_dto import ActivityDTO


class PortfolioSummaryDTO(BaseModel):
    portfolio: PortfolioDTO
    total_value_usd: float
    total_value_display: str
    recent_activity: List[ActivityDTO] = []
