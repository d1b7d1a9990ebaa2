from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional, Tuple

from swipetrade.commons.enums.trade_enums import TradeActionEnum
from swipetrade.domain.portfolio.dtos.portfolio_dto import (
    DUST_EPSILON,
    PortfolioDTO,
    PortfolioEntryDTO,
)
from swipetrade.domain.tokens.dtos.token_dto import TokenDTO


def apply_fill(
    portfolio: PortfolioDTO,
    token: TokenDTO,
    action: TradeActionEnum,
    token_amount: float,
    now: Optional[datetime] = None,
) -> Tuple[PortfolioDTO, bool]:
    """
    Apply a filled trade to a portfolio snapshot.

    Returns (portfolio, changed). The input portfolio is not modified.

    - BUY adds token_amount and token_amount * price of value, creating the
      entry if needed.
    - SELL subtracts token_amount and re-values the remainder at price.
      Remainders <= DUST_EPSILON drop the entry. Selling an untracked token
      changes nothing: the store is advisory, the chain is authoritative.
    """
    entries = list(portfolio.tokens)
    idx = next((i for i, e in enumerate(entries) if e.address == token.address), None)

    if action == TradeActionEnum.BUY:
        if idx is None:
            entries.append(
                PortfolioEntryDTO.from_token(
                    token,
                    held_amount=token_amount,
                    held_value_usd=token_amount * token.price,
                )
            )
        else:
            current = entries[idx]
            entries[idx] = PortfolioEntryDTO.from_token(
                token,
                held_amount=current.held_amount + token_amount,
                held_value_usd=current.held_value_usd + token_amount * token.price,
            )

    elif action == TradeActionEnum.SELL:
        if idx is None:
            return portfolio, False

        remaining = entries[idx].held_amount - token_amount
        if remaining <= DUST_EPSILON:
            del entries[idx]
        else:
            entries[idx] = PortfolioEntryDTO.from_token(
                token,
                held_amount=remaining,
                held_value_usd=remaining * token.price,
            )

    else:
        raise ValueError(f"Unsupported trade action {action}")

    updated = portfolio.model_copy(
        update={
            "tokens": entries,
            "last_updated": now or datetime.now(timezone.utc),
        }
    )
    return updated, True
