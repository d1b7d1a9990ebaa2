from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account: str
    email: Optional[str] = None
    default_trade_amount: float = Field(..., gt=0.0)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc))
