from typing import Protocol

from swipetrade.domain.trading.dtos.swap_dto import QuoteDTO, UnsignedTransactionDTO

# Wrapped SOL mint, used by the aggregator for native SOL.
NATIVE_SOL_MINT = "So11111111111111111111111111111111111111112"
SOL_DECIMALS = 9


class Signer(Protocol):
    """
    Wallet capability supplied by the caller. Holds the keys; we never do.
    """
    public_key: str

    async def sign_and_send(self, transaction: bytes) -> str:
        """Sign the serialized transaction, send it and return its signature."""
        ...


class SwapClient(Protocol):
    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
    ) -> QuoteDTO: ...

    async def build_swap_transaction(
        self,
        quote: QuoteDTO,
        signer_account: str,
    ) -> UnsignedTransactionDTO: ...

    async def sign_and_submit(
        self,
        unsigned: UnsignedTransactionDTO,
        signer: Signer,
    ) -> str: ...

    async def get_token_decimals(self, mint: str) -> int: ...
