import logging
from typing import List, Optional, Union

from swipetrade.domain.tokens.dtos.token_dto import TokenCardDTO, TokenDTO
from swipetrade.infrastructure.data.discovery_base import TokenDiscoveryService

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(self, discovery: TokenDiscoveryService):
        self.discovery = discovery

    async def get_trending_tokens(self) -> List[TokenDTO]:
        return await self.discovery.get_trending_tokens()

    async def get_token(self, address: str) -> Optional[TokenDTO]:
        return await self.discovery.get_token_by_address(address)

    # -------- formatting --------

    @classmethod
    def to_card(cls, token: TokenDTO) -> TokenCardDTO:
        return TokenCardDTO(
            **token.model_dump(),
            price_display=cls.format_price(token.price),
            change_display=cls.format_percentage_change(token.change_24h or 0.0),
            market_cap_display=cls.format_large_number(token.market_cap),
            volume_display=cls.format_large_number(token.volume_24h),
        )

    @staticmethod
    def format_price(price: float) -> str:
        if price < 0.01:
            return f"${price:.8f}"
        elif price < 1:
            return f"${price:.4f}"
        return f"${price:.2f}"

    @staticmethod
    def format_percentage_change(change: float) -> str:
        sign = "+" if change >= 0 else ""
        return f"{sign}{change:.1f}%"

    @staticmethod
    def format_large_number(value: Union[str, float, int, None]) -> str:
        if isinstance(value, str):
            return value  # already formatted upstream
        if value is None:
            return "$0"

        num = float(value)
        if num != num:  # NaN
            return "$0"

        for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
            if num >= threshold:
                return f"${num / threshold:.2f}{suffix}"
        return f"${num:.2f}"
