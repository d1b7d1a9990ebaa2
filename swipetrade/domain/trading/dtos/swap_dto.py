from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class QuoteDTO(BaseModel):
    """Aggregator quote. Amounts are integer base units of each asset."""
    input_mint: str
    output_mint: str
    in_amount: int = Field(..., ge=0)
    out_amount: int = Field(..., ge=0)
    slippage_bps: int
    price_impact_pct: float = 0.0
    # Untouched quote payload, echoed back when building the swap.
    raw: Dict[str, Any] = Field(default_factory=dict)


class UnsignedTransactionDTO(BaseModel):
    transaction: str  # base64 encoded
    last_valid_block_height: Optional[int] = None
