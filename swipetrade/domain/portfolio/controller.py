from typing import List

from fastapi import APIRouter, Depends, Query
from dependency_injector.wiring import inject, Provide

from swipetrade.domain.portfolio.dtos.summary_dto import PortfolioSummaryDTO
from swipetrade.domain.portfolio.dtos.watchlist_dto import WatchlistDTO
from swipetrade.domain.portfolio.portfolio_module import PortfolioModule
from swipetrade.domain.portfolio.portfolio_service import PortfolioService
from swipetrade.domain.tokens.dtos.token_dto import TokenDTO
from swipetrade.domain.trading.dtos.trade_dto import ActivityDTO


router = APIRouter(tags=["portfolio"])


@router.get("/portfolio/{account}", response_model=PortfolioSummaryDTO)
@inject
async def get_portfolio(
    account: str,
    service: PortfolioService = Depends(Provide[PortfolioModule.portfolio_service]),
) -> PortfolioSummaryDTO:
    return await service.get_summary(account)


@router.get("/portfolio/{account}/activity", response_model=List[ActivityDTO])
@inject
async def list_activity(
    account: str,
    limit: int = Query(default=10, ge=1, le=100),
    service: PortfolioService = Depends(Provide[PortfolioModule.portfolio_service]),
) -> List[ActivityDTO]:
    return await service.list_activity(account, limit)


@router.get("/watchlist/{account}", response_model=WatchlistDTO)
@inject
async def get_watchlist(
    account: str,
    service: PortfolioService = Depends(Provide[PortfolioModule.portfolio_service]),
) -> WatchlistDTO:
    return await service.get_watchlist(account)


@router.post("/watchlist/{account}")
@inject
async def add_to_watchlist(
    account: str,
    token: TokenDTO,
    service: PortfolioService = Depends(Provide[PortfolioModule.portfolio_service]),
) -> dict:
    return {"success": await service.add_to_watchlist(account, token)}


@router.delete("/watchlist/{account}/{token_address}")
@inject
async def remove_from_watchlist(
    account: str,
    token_address: str,
    service: PortfolioService = Depends(Provide[PortfolioModule.portfolio_service]),
) -> dict:
    return {"success": await service.remove_from_watchlist(account, token_address)}
