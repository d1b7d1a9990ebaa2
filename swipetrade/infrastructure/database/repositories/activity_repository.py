import logging
from datetime import datetime, timezone
from typing import List
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from swipetrade.commons.enums.trade_enums import TradeActionEnum
from swipetrade.commons.errors import StoreConflict
from swipetrade.domain.trading.dtos.trade_dto import ActivityDTO
from swipetrade.infrastructure.database.models.activity_model import ActivityModel

logger = logging.getLogger(__name__)


class ActivityRepository:
    """
    Repository for the append-only activity log.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, activity: ActivityDTO) -> ActivityDTO:
        """
        Insert a new entry. Assigns id and created_at when missing.

        Raises:
            StoreConflict: an entry with the same id already exists
        """
        stored = activity.model_copy(
            update={
                "id": activity.id or str(uuid4()),
                "created_at": activity.created_at or datetime.now(timezone.utc),
            }
        )

        model = ActivityModel(
            id=stored.id,
            account=stored.account,
            token=stored.token.model_dump(mode="json"),
            action=stored.action.value,
            amount=stored.amount,
            transaction_id=stored.transaction_id,
            created_at=stored.created_at,
        )

        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise StoreConflict(f"Activity {stored.id} already exists") from e

        return stored

    async def list_for_account(self, account: str, limit: int = 10) -> List[ActivityDTO]:
        """Newest first."""
        stmt = (
            select(ActivityModel)
            .where(ActivityModel.account == account)
            .order_by(ActivityModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._model_to_dto(m) for m in result.scalars().all()]

    @staticmethod
    def _model_to_dto(model: ActivityModel) -> ActivityDTO:
        return ActivityDTO(
            id=model.id,
            account=model.account,
            token=model.token,
            action=TradeActionEnum(model.action),
            amount=model.amount,
            created_at=model.created_at,
            transaction_id=model.transaction_id,
        )
