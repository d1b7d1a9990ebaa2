from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from swipetrade.commons.errors import DiscoveryUnavailable
from swipetrade.domain.tokens.dtos.token_dto import TokenDTO
from swipetrade.infrastructure.data.discovery_base import TokenDiscoveryService

logger = logging.getLogger(__name__)

LOGO_URL_TEMPLATE = (
    "https://raw.githubusercontent.com/solana-labs/token-list/main/"
    "assets/mainnet/{address}/logo.png"
)

# Served whenever DexScreener cannot be reached so the swipe deck is never empty.
FALLBACK_TOKENS: List[TokenDTO] = [
    TokenDTO(
        address="So11111111111111111111111111111111111111112",
        name="Solana",
        symbol="SOL",
        logo_uri=LOGO_URL_TEMPLATE.format(
            address="So11111111111111111111111111111111111111112"),
        price=89.42,
        change_24h=5.2,
        market_cap=41_200_000_000,
        volume_24h=2_100_000_000,
    ),
    TokenDTO(
        address="4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R",
        name="Raydium",
        symbol="RAY",
        logo_uri=LOGO_URL_TEMPLATE.format(
            address="4k3Dyjzvzp8eMZWUXbBCjEvwSkkk59S5iCNLY3QrkX6R"),
        price=10.3041,
        change_24h=-68.8,
        market_cap=645_000_000,
        volume_24h=45_000_000,
    ),
]


class DexScreenerService(TokenDiscoveryService):
    """
    Trending Raydium pairs on Solana from the public DexScreener API.
    """

    CHAIN_ID = "solana"
    DEX_ID = "raydium"

    def __init__(
        self,
        base_url: str = "https://api.dexscreener.com",
        limit: int = 20,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.limit = limit
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    # -------- helpers internos --------

    async def _get_pairs(self, path: str, params: Optional[Dict[str, str]] = None) -> List[Dict[str, Any]]:
        try:
            response = await self._client.get(f"{self.base_url}{path}", params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise DiscoveryUnavailable(f"DexScreener request failed: {e}") from e
        except ValueError as e:
            raise DiscoveryUnavailable(f"DexScreener returned invalid JSON: {e}") from e

        pairs = data.get("pairs") if isinstance(data, dict) else None
        if pairs is None:
            return []
        if not isinstance(pairs, list):
            raise DiscoveryUnavailable(
                f"DexScreener returned pairs as {type(pairs).__name__}, expected a list")
        return [p for p in pairs if isinstance(p, dict)]

    def _is_listed_pair(self, pair: Dict[str, Any]) -> bool:
        return (
            pair.get("chainId") == self.CHAIN_ID
            and pair.get("dexId") == self.DEX_ID
            and isinstance(pair.get("baseToken"), dict)
            and bool(pair["baseToken"].get("address"))
            and bool(pair.get("priceUsd"))
        )

    @staticmethod
    def _pair_to_token(pair: Dict[str, Any]) -> TokenDTO:
        base = pair["baseToken"]
        address = base["address"]
        info = pair.get("info") or {}

        created_at = None
        if pair.get("pairCreatedAt"):
            # DexScreener reports milliseconds since epoch.
            created_at = datetime.fromtimestamp(
                pair["pairCreatedAt"] / 1000, tz=timezone.utc)

        return TokenDTO(
            address=address,
            name=base.get("name") or base.get("symbol") or address,
            symbol=base.get("symbol") or "",
            logo_uri=info.get("imageUrl") or LOGO_URL_TEMPLATE.format(address=address),
            price=float(pair["priceUsd"]),
            change_24h=(pair.get("priceChange") or {}).get("h24") or 0.0,
            market_cap=pair.get("marketCap") or 0.0,
            volume_24h=(pair.get("volume") or {}).get("h24") or 0.0,
            liquidity=(pair.get("liquidity") or {}).get("usd") or 0.0,
            created_at=created_at,
            url=pair.get("url"),
        )

    # -------- API pública --------

    async def get_trending_tokens(self) -> List[TokenDTO]:
        """
        Top Raydium pairs by 24h volume. Never raises and never returns an
        empty list: any failure yields FALLBACK_TOKENS.
        """
        try:
            pairs = await self._get_pairs("/latest/dex/search", params={"q": self.DEX_ID})
            tokens = []
            for pair in pairs:
                if not self._is_listed_pair(pair):
                    continue
                try:
                    tokens.append(self._pair_to_token(pair))
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    logger.debug(f"Skipping malformed pair {pair.get('pairAddress')}: {e}")
                if len(tokens) >= self.limit:
                    break

            if not tokens:
                raise DiscoveryUnavailable("DexScreener returned no Raydium pairs")

        except DiscoveryUnavailable as e:
            logger.warning(f"Token discovery unavailable, serving fallback tokens: {e}")
            return list(FALLBACK_TOKENS)

        tokens.sort(key=lambda t: t.volume_24h or 0.0, reverse=True)
        logger.info(f"Fetched Raydium tokens: {len(tokens)}")
        return tokens

    async def get_token_by_address(self, address: str) -> Optional[TokenDTO]:
        try:
            pairs = await self._get_pairs(f"/latest/dex/tokens/{address}")
        except DiscoveryUnavailable as e:
            logger.error(f"Error fetching token {address} from DexScreener: {e}")
            return None

        pair = next(
            (
                p for p in pairs
                if self._is_listed_pair(p) and p["baseToken"].get("address") == address
            ),
            None,
        )
        if pair is None:
            return None

        try:
            return self._pair_to_token(pair)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed DexScreener pair for {address}: {e}")
            return None
