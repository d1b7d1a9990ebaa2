import logging
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from swipetrade.commons.errors import StoreConflict

logger = logging.getLogger(__name__)

DTO = TypeVar("DTO", bound=BaseModel)


class VersionedTokenListRepository(Generic[DTO]):
    """
    Shared persistence for records shaped as {account, tokens[], last_updated, version}.

    Writes are compare-and-swap on `version`: a save only lands if the stored
    version still equals the one the caller read, otherwise StoreConflict.
    """

    model: Type[Any]
    dto: Type[DTO]
    record_name: str = "record"

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, account: str) -> Optional[DTO]:
        stmt = select(self.model).where(self.model.account == account)
        res = await self.session.execute(stmt)
        row = res.scalar_one_or_none()
        return self._model_to_dto(row) if row else None

    async def ensure_default(self, account: str) -> DTO:
        existing = await self.get(account)
        if existing:
            return existing

        row = self.model(
            account=account,
            tokens=[],
            last_updated=datetime.now(timezone.utc),
            version=0,
        )
        self.session.add(row)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            existing = await self.get(account)
            if existing:
                return existing
            raise

        await self.session.refresh(row)
        logger.info(f"🧺 Empty {self.record_name} created for {account}")
        return self._model_to_dto(row)

    async def save(self, dto: DTO) -> DTO:
        """
        Replace tokens for dto.account if dto.version matches the stored one.
        Returns the stored DTO with its new version.
        """
        tokens = self._serialize_tokens(dto.tokens)
        new_version = dto.version + 1

        stmt = (
            update(self.model)
            .where(
                self.model.account == dto.account,
                self.model.version == dto.version,
            )
            .values(
                tokens=tokens,
                last_updated=dto.last_updated,
                version=new_version,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)

        if result.rowcount == 0:
            if await self.get(dto.account) is not None:
                await self.session.rollback()
                raise StoreConflict(
                    f"{self.record_name} for {dto.account} changed since version {dto.version}"
                )

            self.session.add(self.model(
                account=dto.account,
                tokens=tokens,
                last_updated=dto.last_updated,
                version=new_version,
            ))

        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise StoreConflict(
                f"{self.record_name} for {dto.account} was created concurrently"
            ) from e

        return dto.model_copy(update={"version": new_version})

    @staticmethod
    def _serialize_tokens(tokens: List[BaseModel]) -> List[Dict[str, Any]]:
        return [t.model_dump(mode="json") for t in tokens]

    def _model_to_dto(self, row: Any) -> DTO:
        return self.dto(
            account=row.account,
            tokens=row.tokens or [],
            last_updated=row.last_updated,
            version=row.version,
        )
