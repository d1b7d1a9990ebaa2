import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Awaitable, Dict, List, Optional, Type, TypeVar, Union

from swipetrade.commons.enums.trade_enums import TradeActionEnum, TradeStateEnum
from swipetrade.commons.errors import (
    BuildFailed,
    InvalidInput,
    QuoteUnavailable,
    StoreConflict,
    StoreUnavailable,
    SubmitFailed,
    SwipeTradeError,
    TradeInProgress,
)
from swipetrade.domain.trading.dtos.trade_dto import (
    ActivityDTO,
    AggregatorFill,
    SimulatedFill,
    TradeRequestDTO,
    TradeResultDTO,
)
from swipetrade.domain.trading.reconciler import apply_fill
from swipetrade.infrastructure.database.store_base import RecordStore
from swipetrade.infrastructure.swap.swap_base import (
    NATIVE_SOL_MINT,
    SOL_DECIMALS,
    Signer,
    SwapClient,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

Fill = Union[AggregatorFill, SimulatedFill]


@dataclass
class TradeContext:
    request: TradeRequestDTO
    state: TradeStateEnum = TradeStateEnum.START
    warnings: List[str] = field(default_factory=list)

    def advance(self, state: TradeStateEnum) -> None:
        logger.debug(
            f"Trade {self.request.action.value} {self.request.token.symbol} "
            f"for {self.request.account}: {self.state.value} → {state.value}"
        )
        self.state = state


class TradingService:
    """
    Turns a swipe into a swap and keeps the stored portfolio in line with it.

    START → QUOTING → BUILDING → SUBMITTING → RECORDING → RECONCILING → DONE
    Any failure up to and including SUBMITTING ends in FAILED with no store
    writes. After a successful submit, activity and portfolio writes are
    best effort: their failures become warnings and never undo the swap.
    """

    def __init__(
        self,
        store: RecordStore,
        swap: SwapClient,
        slippage_bps: int = 100,
        reconcile_max_attempts: int = 3,
        step_timeout: float = 30.0,
    ):
        self.store = store
        self.swap = swap
        self.slippage_bps = slippage_bps
        self.reconcile_max_attempts = reconcile_max_attempts
        self.step_timeout = step_timeout
        self._in_flight: Dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------
    async def execute_trade(
        self,
        request: TradeRequestDTO,
        signer: Optional[Signer] = None,
    ) -> TradeResultDTO:
        """
        Execute a BUY or SELL.

        With a signer the trade is routed through the aggregator. Without one
        it is filled at the token's listed price and request.sol_price_usd,
        and the result carries no transaction id.
        """
        ctx = TradeContext(request=request)

        try:
            self._validate(request, signer)
        except InvalidInput as e:
            return self._failed(ctx, e)

        account = request.account
        lock = self._in_flight.setdefault(account, asyncio.Lock())
        if lock.locked():
            return self._failed(
                ctx, TradeInProgress(f"A trade for {account} is already in flight"))

        async with lock:
            try:
                return await self._run(ctx, signer)
            finally:
                self._in_flight.pop(account, None)

    async def _run(self, ctx: TradeContext, signer: Optional[Signer]) -> TradeResultDTO:
        request = ctx.request
        logger.info(
            f"Processing trade: {request.action.value} {request.amount} "
            f"{'SOL of ' if request.action == TradeActionEnum.BUY else ''}"
            f"{request.token.symbol} for {request.account} "
            f"({'aggregator' if signer else 'simulated'})"
        )

        try:
            if signer is not None:
                fill: Fill = await self._aggregator_fill(ctx, signer)
            else:
                fill = self._simulated_fill(request)
        except SwipeTradeError as e:
            return self._failed(ctx, e)

        ctx.advance(TradeStateEnum.RECORDING)
        activity = await self._record_activity(ctx, fill)

        ctx.advance(TradeStateEnum.RECONCILING)
        await self._reconcile_portfolio(ctx, fill)

        ctx.advance(TradeStateEnum.DONE)
        transaction_id = fill.transaction_id if isinstance(fill, AggregatorFill) else None

        logger.info(
            f"Trade done: {request.action.value} {request.token.symbol} "
            f"tokens={fill.token_amount:.8f} sol={fill.sol_amount:.8f} "
            f"tx={transaction_id or 'simulated'}"
        )
        return TradeResultDTO(
            success=True,
            state=ctx.state,
            transaction_id=transaction_id,
            fill=fill,
            activity=activity,
            warnings=ctx.warnings,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def _validate(self, request: TradeRequestDTO, signer: Optional[Signer]) -> None:
        if not request.account or not request.account.strip():
            raise InvalidInput("Account must not be empty")
        if not math.isfinite(request.amount) or request.amount <= 0:
            raise InvalidInput(f"Amount must be greater than 0, got {request.amount}")
        if not request.token.address or not request.token.address.strip():
            raise InvalidInput("Token address must not be empty")
        if not request.token.price > 0:
            raise InvalidInput(
                f"Token {request.token.symbol} must have a positive price")
        if request.slippage_bps is not None and not 1 <= request.slippage_bps <= 10_000:
            raise InvalidInput(
                f"Slippage must be between 1 and 10000 bps, got {request.slippage_bps}")

        if signer is None:
            sol_price = request.sol_price_usd
            if sol_price is None or not math.isfinite(sol_price) or sol_price <= 0:
                raise InvalidInput(
                    "A positive sol_price_usd is required to simulate a trade without a signer")
        elif signer.public_key != request.account:
            raise InvalidInput(
                f"Signer {signer.public_key} does not match account {request.account}")
        elif (request.action == TradeActionEnum.BUY
              and round(request.amount * 10 ** SOL_DECIMALS) <= 0):
            # SOL decimals are fixed; SELL is checked once the mint's decimals are known.
            raise InvalidInput(f"Amount {request.amount} is below one lamport")

    # ------------------------------------------------------------------
    # Fills
    # ------------------------------------------------------------------
    async def _aggregator_fill(self, ctx: TradeContext, signer: Signer) -> AggregatorFill:
        request = ctx.request
        token_mint = request.token.address
        is_buy = request.action == TradeActionEnum.BUY

        ctx.advance(TradeStateEnum.QUOTING)
        token_decimals = await self._step(
            self.swap.get_token_decimals(token_mint), QuoteUnavailable, "decimals lookup")

        if is_buy:
            input_mint, output_mint = NATIVE_SOL_MINT, token_mint
            amount_base_units = round(request.amount * 10 ** SOL_DECIMALS)
        else:
            input_mint, output_mint = token_mint, NATIVE_SOL_MINT
            amount_base_units = round(request.amount * 10 ** token_decimals)

        if amount_base_units <= 0:
            raise InvalidInput(f"Amount {request.amount} is below one base unit")

        quote = await self._step(
            self.swap.get_quote(
                input_mint,
                output_mint,
                amount_base_units,
                request.slippage_bps or self.slippage_bps,
            ),
            QuoteUnavailable,
            "quote",
        )

        ctx.advance(TradeStateEnum.BUILDING)
        unsigned = await self._step(
            self.swap.build_swap_transaction(quote, signer.public_key),
            BuildFailed,
            "swap build",
        )

        ctx.advance(TradeStateEnum.SUBMITTING)
        transaction_id = await self._step(
            self.swap.sign_and_submit(unsigned, signer), SubmitFailed, "submit")

        # The quote's amounts are the fill of record, not the listed price.
        if is_buy:
            token_amount = quote.out_amount / 10 ** token_decimals
            sol_amount = quote.in_amount / 10 ** SOL_DECIMALS
        else:
            token_amount = quote.in_amount / 10 ** token_decimals
            sol_amount = quote.out_amount / 10 ** SOL_DECIMALS

        return AggregatorFill(
            token_amount=token_amount,
            sol_amount=sol_amount,
            transaction_id=transaction_id,
            price_impact_pct=quote.price_impact_pct,
            quote=quote,
        )

    @staticmethod
    def _simulated_fill(request: TradeRequestDTO) -> SimulatedFill:
        sol_price = request.sol_price_usd
        token_price = request.token.price

        if request.action == TradeActionEnum.BUY:
            token_amount = request.amount * sol_price / token_price
            sol_amount = request.amount
        else:
            token_amount = request.amount
            sol_amount = request.amount * token_price / sol_price

        return SimulatedFill(
            token_amount=token_amount,
            sol_amount=sol_amount,
            sol_price_usd=sol_price,
        )

    async def _step(
        self,
        call: Awaitable[T],
        error_cls: Type[SwipeTradeError],
        step_name: str,
    ) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.step_timeout)
        except SwipeTradeError:
            raise
        except asyncio.TimeoutError as e:
            raise error_cls(f"{step_name} timed out after {self.step_timeout}s") from e
        except Exception as e:
            logger.exception(f"Unexpected error during {step_name}")
            raise error_cls(f"{step_name} failed: {e}") from e

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------
    async def _record_activity(self, ctx: TradeContext, fill: Fill) -> Optional[ActivityDTO]:
        request = ctx.request
        entry = ActivityDTO(
            account=request.account,
            token=request.token,
            action=request.action,
            amount=request.amount,
            transaction_id=fill.transaction_id if isinstance(fill, AggregatorFill) else None,
        )
        try:
            return await self.store.append_activity(entry)
        except (StoreUnavailable, StoreConflict) as e:
            message = f"Trade completed but activity was not recorded: {e.message}"
            logger.warning(message)
            ctx.warnings.append(message)
            return None

    async def _reconcile_portfolio(self, ctx: TradeContext, fill: Fill) -> None:
        request = ctx.request

        for attempt in range(1, self.reconcile_max_attempts + 1):
            try:
                portfolio = await self.store.get_portfolio(request.account)
                updated, changed = apply_fill(
                    portfolio, request.token, request.action, fill.token_amount)

                if not changed:
                    logger.info(
                        f"{request.token.symbol} not tracked in {request.account}'s portfolio, "
                        f"nothing to reconcile")
                    return

                await self.store.put_portfolio(updated)
                return

            except StoreConflict as e:
                logger.warning(
                    f"Portfolio write conflict for {request.account} "
                    f"(attempt {attempt}/{self.reconcile_max_attempts}): {e.message}")
                continue
            except StoreUnavailable as e:
                message = f"Trade completed but portfolio was not updated: {e.message}"
                logger.warning(message)
                ctx.warnings.append(message)
                return

        message = (
            f"Trade completed but portfolio was not updated after "
            f"{self.reconcile_max_attempts} conflicting writes")
        logger.warning(message)
        ctx.warnings.append(message)

    # ------------------------------------------------------------------
    # Results
    # ------------------------------------------------------------------
    @staticmethod
    def _failed(ctx: TradeContext, error: SwipeTradeError) -> TradeResultDTO:
        logger.error(
            f"Trade failed in {ctx.state.value} ({error.kind.value}): {error.message}")
        ctx.state = TradeStateEnum.FAILED
        return TradeResultDTO(
            success=False,
            state=TradeStateEnum.FAILED,
            error=error.message,
            error_kind=error.kind,
            warnings=ctx.warnings,
        )
