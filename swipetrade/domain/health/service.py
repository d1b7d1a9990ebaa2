import logging

from swipetrade.infrastructure.database.store_base import RecordStore

logger = logging.getLogger(__name__)


class HealthService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def check_store_health(self) -> bool:
        try:
            return await self.store.health_check()
        except Exception as e:
            logger.error(f"Store health check failed: {e}")
            return False
