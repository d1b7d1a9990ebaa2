import asyncio
import base64
import json
import logging
from typing import Dict, Optional
from uuid import uuid4

from swipetrade.commons.errors import QuoteUnavailable, SubmitFailed
from swipetrade.domain.trading.dtos.swap_dto import QuoteDTO, UnsignedTransactionDTO
from swipetrade.infrastructure.swap.swap_base import (
    NATIVE_SOL_MINT,
    SOL_DECIMALS,
    Signer,
    SwapClient,
)

logger = logging.getLogger(__name__)


class FakeSwapClient(SwapClient):
    """
    Swap client that:
    - quotes from a fixed USD price table (no slippage, no impact)
    - builds a dummy base64 payload
    - still routes signing through the caller's signer
    """

    def __init__(
        self,
        prices_usd: Optional[Dict[str, float]] = None,
        decimals: Optional[Dict[str, int]] = None,
        default_decimals: int = 6,
    ):
        self._prices = dict(prices_usd or {})
        self._decimals = {NATIVE_SOL_MINT: SOL_DECIMALS, **(decimals or {})}
        self._default_decimals = default_decimals

    def set_price(self, mint: str, price_usd: float) -> None:
        self._prices[mint] = price_usd

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> QuoteDTO:
        await asyncio.sleep(0)

        in_price = self._prices.get(input_mint)
        out_price = self._prices.get(output_mint)
        if not in_price or not out_price:
            raise QuoteUnavailable(f"No route for {input_mint} → {output_mint}")

        in_decimals = await self.get_token_decimals(input_mint)
        out_decimals = await self.get_token_decimals(output_mint)

        notional = amount / 10 ** in_decimals * in_price
        out_amount = int(notional / out_price * 10 ** out_decimals)

        return QuoteDTO(
            input_mint=input_mint,
            output_mint=output_mint,
            in_amount=amount,
            out_amount=out_amount,
            slippage_bps=slippage_bps,
            price_impact_pct=0.0,
            raw={"inAmount": str(amount), "outAmount": str(out_amount)},
        )

    async def build_swap_transaction(
        self,
        quote: QuoteDTO,
        signer_account: str,
    ) -> UnsignedTransactionDTO:
        payload = json.dumps({"quote": quote.raw, "user": signer_account}).encode()
        return UnsignedTransactionDTO(transaction=base64.b64encode(payload).decode())

    async def sign_and_submit(
        self,
        unsigned: UnsignedTransactionDTO,
        signer: Signer,
    ) -> str:
        try:
            signature = await signer.sign_and_send(base64.b64decode(unsigned.transaction))
        except Exception as e:
            raise SubmitFailed(f"Signing / submission failed: {e}") from e
        return signature or f"fake-{uuid4().hex}"

    async def get_token_decimals(self, mint: str) -> int:
        return self._decimals.get(mint, self._default_decimals)
