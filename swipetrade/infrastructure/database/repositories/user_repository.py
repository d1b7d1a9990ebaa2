import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from swipetrade.domain.users.dtos.user_dto import UserDTO
from swipetrade.infrastructure.database.models.user_model import UserModel

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account: str) -> Optional[UserDTO]:
        stmt = select(UserModel).where(UserModel.account == account)
        res = await self.session.execute(stmt)
        model = res.scalar_one_or_none()
        return self._model_to_dto(model) if model else None

    async def ensure_default(
        self,
        account: str,
        default_trade_amount: float,
    ) -> UserDTO:
        """
        Return the user, creating it with the default trade amount on first access.
        """
        existing = await self.get(account)
        if existing:
            return existing

        model = UserModel(
            account=account,
            default_trade_amount=default_trade_amount,
        )
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError:
            # Another session created it first.
            await self.session.rollback()
            existing = await self.get(account)
            if existing:
                return existing
            raise

        await self.session.refresh(model)
        logger.info(f"👤 User created for {account}")
        return self._model_to_dto(model)

    async def save(self, dto: UserDTO) -> UserDTO:
        """Full replace of the user row (upsert)."""
        model = await self.session.get(UserModel, dto.account)
        if model is None:
            model = UserModel(account=dto.account, created_at=dto.created_at)
            self.session.add(model)

        model.email = dto.email
        model.default_trade_amount = dto.default_trade_amount

        await self.session.commit()
        await self.session.refresh(model)
        return self._model_to_dto(model)

    @staticmethod
    def _model_to_dto(model: UserModel) -> UserDTO:
        return UserDTO(
            account=model.account,
            email=model.email,
            default_trade_amount=model.default_trade_amount,
            created_at=model.created_at,
        )
