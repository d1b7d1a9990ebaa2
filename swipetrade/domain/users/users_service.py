import logging
import math

from swipetrade.commons.errors import InvalidInput, StoreUnavailable
from swipetrade.domain.users.dtos.user_dto import UserDTO
from swipetrade.infrastructure.database.store_base import RecordStore

logger = logging.getLogger(__name__)


class UsersService:
    def __init__(self, store: RecordStore, fallback_trade_amount: float = 0.001):
        self.store = store
        self.fallback_trade_amount = fallback_trade_amount

    async def get_user(self, account: str) -> UserDTO:
        """Stored user, or an unsaved default user when the store is down."""
        if not account:
            raise InvalidInput("Account must not be empty")
        try:
            return await self.store.get_user(account)
        except StoreUnavailable as e:
            logger.warning(
                f"User {account} unavailable, using default amount "
                f"{self.fallback_trade_amount}: {e}")
            return UserDTO(account=account, default_trade_amount=self.fallback_trade_amount)

    async def get_default_amount(self, account: str) -> float:
        user = await self.get_user(account)
        return user.default_trade_amount

    async def update_default_amount(self, account: str, amount: float) -> UserDTO:
        if not account:
            raise InvalidInput("Account must not be empty")
        if not math.isfinite(amount) or amount <= 0:
            raise InvalidInput(f"Default amount must be greater than 0, got {amount}")

        # Writes must not be based on a degraded default record.
        user = await self.store.get_user(account)
        updated = user.model_copy(update={"default_trade_amount": amount})
        saved = await self.store.put_user(updated)

        logger.info(f"Updated default amount to {amount} SOL for {account}")
        return saved
