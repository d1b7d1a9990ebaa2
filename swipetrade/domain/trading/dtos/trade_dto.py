from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from swipetrade.commons.enums.trade_enums import TradeActionEnum, TradeStateEnum
from swipetrade.commons.errors import ErrorKind
from swipetrade.domain.tokens.dtos.token_dto import TokenDTO
from swipetrade.domain.trading.dtos.swap_dto import QuoteDTO


class ActivityDTO(BaseModel):
    """
    Append-only trade log entry.
    amount is SOL for BUY and token units for SELL.
    """

    model_config = ConfigDict(from_attributes=True)

    id: Optional[str] = None
    account: str
    token: TokenDTO
    action: TradeActionEnum
    amount: float = Field(..., gt=0.0)
    created_at: Optional[datetime] = None
    transaction_id: Optional[str] = None


class TradeRequestDTO(BaseModel):
    """
    Inputs are validated by TradingService so that bad requests become
    InvalidInput failures instead of schema errors.
    """
    account: str
    token: TokenDTO
    action: TradeActionEnum
    amount: float
    # Required when the trade runs without a signer.
    sol_price_usd: Optional[float] = None
    slippage_bps: Optional[int] = None


class AggregatorFill(BaseModel):
    kind: Literal["aggregator"] = "aggregator"
    token_amount: float
    sol_amount: float
    transaction_id: str
    price_impact_pct: float = 0.0
    quote: QuoteDTO


class SimulatedFill(BaseModel):
    kind: Literal["simulated"] = "simulated"
    token_amount: float
    sol_amount: float
    sol_price_usd: float


TradeFill = Annotated[
    Union[AggregatorFill, SimulatedFill],
    Field(discriminator="kind"),
]


class TradeResultDTO(BaseModel):
    success: bool
    state: TradeStateEnum
    transaction_id: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    fill: Optional[TradeFill] = None
    activity: Optional[ActivityDTO] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_simulated(self) -> bool:
        return isinstance(self.fill, SimulatedFill)
