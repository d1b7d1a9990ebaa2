from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from swipetrade.domain.tokens.dtos.token_dto import TokenDTO


class WatchlistDTO(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account: str
    tokens: List[TokenDTO] = Field(default_factory=list)
    last_updated: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc))
    version: int = 0

    @field_validator("tokens")
    @classmethod
    def unique_addresses(cls, v: List[TokenDTO]) -> List[TokenDTO]:
        addresses = [t.address for t in v]
        if len(addresses) != len(set(addresses)):
            raise ValueError("Watchlist tokens must be unique by address")
        return v

    def contains(self, address: str) -> bool:
        return any(t.address == address for t in self.tokens)
