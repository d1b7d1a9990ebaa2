from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from swipetrade.domain.tokens.dtos.token_dto import TokenDTO

# Holdings at or below this amount are treated as fully sold.
DUST_EPSILON = 1e-6


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PortfolioEntryDTO(TokenDTO):
    """
    A held token. held_value_usd is the value at the last trade price,
    not a live valuation.
    """
    held_amount: float = Field(default=0.0, ge=0.0)
    held_value_usd: float = Field(default=0.0, ge=0.0)

    @classmethod
    def from_token(
        cls,
        token: TokenDTO,
        held_amount: float,
        held_value_usd: float,
    ) -> "PortfolioEntryDTO":
        return cls(
            **token.model_dump(exclude={"held_amount", "held_value_usd"}),
            held_amount=held_amount,
            held_value_usd=held_value_usd,
        )


class PortfolioDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account: str
    tokens: List[PortfolioEntryDTO] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=_utcnow)
    version: int = 0

    @field_validator("tokens")
    @classmethod
    def unique_addresses(cls, v: List[PortfolioEntryDTO]) -> List[PortfolioEntryDTO]:
        addresses = [t.address for t in v]
        if len(addresses) != len(set(addresses)):
            raise ValueError("Portfolio tokens must be unique by address")
        return v

    def find(self, address: str) -> Optional[PortfolioEntryDTO]:
        return next((t for t in self.tokens if t.address == address), None)
