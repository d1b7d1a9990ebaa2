from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide
from swipetrade.domain.health.service import HealthService
from swipetrade.domain.health.module import HealthModule


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Health check endpoint")
@inject
async def health_check(service: HealthService = Depends(Provide[HealthModule.service]),
                       ) -> dict:
    store_health = await service.check_store_health()
    status = "healthy" if store_health else "unhealthy"
    return {"status": status, "store": store_health}
