from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenDTO(BaseModel):
    """
    Snapshot of a token as returned by discovery or the aggregator.
    Never mutated; a refresh replaces it wholesale.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    address: str
    name: str
    symbol: str
    logo_uri: str = ""
    price: float = Field(..., ge=0.0)
    change_24h: Optional[float] = None
    market_cap: Optional[float] = None
    volume_24h: Optional[float] = None
    liquidity: Optional[float] = None
    created_at: Optional[datetime] = None
    url: Optional[str] = None


class TokenCardDTO(TokenDTO):
    """TokenDTO plus the strings a swipe card shows."""

    price_display: str
    change_display: str
    market_cap_display: str
    volume_display: str
