import asyncio
import base64
import binascii
import logging
from typing import Any, Dict, Optional

import httpx

from swipetrade.commons.errors import BuildFailed, QuoteUnavailable, SubmitFailed
from swipetrade.domain.trading.dtos.swap_dto import QuoteDTO, UnsignedTransactionDTO
from swipetrade.infrastructure.swap.swap_base import (
    NATIVE_SOL_MINT,
    SOL_DECIMALS,
    Signer,
    SwapClient,
)

logger = logging.getLogger(__name__)


class JupiterClient(SwapClient):
    """
    Swap adapter over the Jupiter aggregator HTTP API.

    Quote, build and decimals lookups are plain request/response calls with
    an explicit timeout; signing is delegated to the caller's wallet.
    """

    def __init__(
        self,
        base_url: str = "https://lite-api.jup.ag/swap/v1",
        rpc_url: str = "https://api.mainnet-beta.solana.com",
        timeout: float = 10.0,
        submit_timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.rpc_url = rpc_url
        self.submit_timeout = submit_timeout
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )
        # Mint decimals are immutable on chain.
        self._decimals: Dict[str, int] = {NATIVE_SOL_MINT: SOL_DECIMALS}

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Quote
    # ------------------------------------------------------------------
    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> QuoteDTO:
        if amount <= 0:
            raise QuoteUnavailable(f"Quote amount must be positive, got {amount}")

        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": slippage_bps,
        }
        logger.debug(f"Requesting Jupiter quote: {params}")

        try:
            response = await self._client.get(f"{self.base_url}/quote", params=params)
            response.raise_for_status()
            data = response.json()
            quote = self._map_quote(data, slippage_bps)
        except httpx.TimeoutException as e:
            logger.error(f"Jupiter quote timed out: {e}")
            raise QuoteUnavailable("Quote request timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Jupiter quote failed: {e}")
            raise QuoteUnavailable(
                f"Quote rejected ({e.response.status_code}): {self._error_detail(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Jupiter quote transport error: {e}")
            raise QuoteUnavailable(f"Quote request failed: {e}") from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected Jupiter quote payload: {e}")
            raise QuoteUnavailable(f"Malformed quote response: {e}") from e

        logger.info(
            f"Quote {input_mint[:6]}→{output_mint[:6]}: in={quote.in_amount} "
            f"out={quote.out_amount} impact={quote.price_impact_pct:.4f}%"
        )
        return quote

    @staticmethod
    def _map_quote(data: Dict[str, Any], slippage_bps: int) -> QuoteDTO:
        if "error" in data:
            raise ValueError(data["error"])

        return QuoteDTO(
            input_mint=data["inputMint"],
            output_mint=data["outputMint"],
            in_amount=int(data["inAmount"]),
            out_amount=int(data["outAmount"]),
            slippage_bps=int(data.get("slippageBps", slippage_bps)),
            price_impact_pct=float(data.get("priceImpactPct") or 0.0),
            raw=data,
        )

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------
    async def build_swap_transaction(
        self,
        quote: QuoteDTO,
        signer_account: str,
    ) -> UnsignedTransactionDTO:
        body = {
            "quoteResponse": quote.raw,
            "userPublicKey": signer_account,
            "wrapAndUnwrapSol": True,
        }

        try:
            response = await self._client.post(f"{self.base_url}/swap", json=body)
            response.raise_for_status()
            data = response.json()
            unsigned = UnsignedTransactionDTO(
                transaction=data["swapTransaction"],
                last_valid_block_height=data.get("lastValidBlockHeight"),
            )
        except httpx.TimeoutException as e:
            logger.error(f"Jupiter swap build timed out: {e}")
            raise BuildFailed("Swap build timed out") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Jupiter swap build failed: {e}")
            raise BuildFailed(
                f"Swap build rejected ({e.response.status_code}): {self._error_detail(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Jupiter swap build transport error: {e}")
            raise BuildFailed(f"Swap build failed: {e}") from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected Jupiter swap payload: {e}")
            raise BuildFailed(f"Malformed swap response: {e}") from e

        return unsigned

    # ------------------------------------------------------------------
    # Sign + submit
    # ------------------------------------------------------------------
    async def sign_and_submit(
        self,
        unsigned: UnsignedTransactionDTO,
        signer: Signer,
    ) -> str:
        try:
            raw = base64.b64decode(unsigned.transaction, validate=True)
        except (binascii.Error, ValueError) as e:
            raise SubmitFailed(f"Transaction payload is not valid base64: {e}") from e

        try:
            signature = await asyncio.wait_for(
                signer.sign_and_send(raw), timeout=self.submit_timeout
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Signer did not answer within {self.submit_timeout}s")
            raise SubmitFailed("Signing / submission timed out") from e
        except Exception as e:
            logger.error(f"Signer rejected transaction: {e}")
            raise SubmitFailed(f"Signing / submission failed: {e}") from e

        if not signature:
            raise SubmitFailed("Signer returned an empty transaction id")

        logger.info(f"Transaction submitted: {signature}")
        return signature

    # ------------------------------------------------------------------
    # Decimals
    # ------------------------------------------------------------------
    async def get_token_decimals(self, mint: str) -> int:
        if mint in self._decimals:
            return self._decimals[mint]

        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "getTokenSupply",
            "params": [mint],
        }
        try:
            response = await self._client.post(self.rpc_url, json=body)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON-RPC object, got {type(data).__name__}")
            if data.get("error"):
                error = data["error"]
                raise ValueError(error.get("message", error) if isinstance(error, dict) else error)
            decimals = int(data["result"]["value"]["decimals"])
        except httpx.HTTPError as e:
            logger.error(f"Decimals lookup for {mint} failed: {e}")
            raise QuoteUnavailable(f"Could not read decimals for {mint}: {e}") from e
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected getTokenSupply payload for {mint}: {e}")
            raise QuoteUnavailable(f"Could not read decimals for {mint}: {e}") from e

        self._decimals[mint] = decimals
        return decimals

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(payload, dict):
            return str(payload.get("error") or payload.get("message") or payload)
        return str(payload)
