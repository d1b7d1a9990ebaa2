from fastapi import APIRouter, Depends, HTTPException
from dependency_injector.wiring import inject, Provide

from swipetrade.commons.errors import ErrorKind
from swipetrade.domain.trading.dtos.trade_dto import TradeRequestDTO, TradeResultDTO
from swipetrade.domain.trading.trading_module import TradingModule
from swipetrade.domain.trading.trading_service import TradingService


router = APIRouter(prefix="/trades", tags=["trades"])

_STATUS_BY_KIND = {
    ErrorKind.INVALID_INPUT: 422,
    ErrorKind.TRADE_IN_PROGRESS: 409,
}


@router.post("", response_model=TradeResultDTO, summary="Execute a simulated trade")
@inject
async def execute_trade(
    request: TradeRequestDTO,
    service: TradingService = Depends(Provide[TradingModule.trading_service]),
) -> TradeResultDTO:
    """
    The server never holds a wallet, so trades placed here always run
    without a signer and are filled at the token's listed price.
    """
    result = await service.execute_trade(request, signer=None)
    if not result.success and result.error_kind in _STATUS_BY_KIND:
        raise HTTPException(
            status_code=_STATUS_BY_KIND[result.error_kind],
            detail={"error": result.error, "kind": result.error_kind.value},
        )
    return result
