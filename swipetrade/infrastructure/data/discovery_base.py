from typing import List, Optional, Protocol

from swipetrade.domain.tokens.dtos.token_dto import TokenDTO


class TokenDiscoveryService(Protocol):
    async def get_trending_tokens(self) -> List[TokenDTO]: ...
    async def get_token_by_address(self, address: str) -> Optional[TokenDTO]: ...
