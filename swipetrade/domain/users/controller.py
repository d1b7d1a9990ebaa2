from fastapi import APIRouter, Depends, HTTPException
from dependency_injector.wiring import inject, Provide
from pydantic import BaseModel

from swipetrade.commons.errors import InvalidInput, StoreUnavailable
from swipetrade.domain.users.dtos.user_dto import UserDTO
from swipetrade.domain.users.users_module import UsersModule
from swipetrade.domain.users.users_service import UsersService


router = APIRouter(prefix="/users", tags=["users"])


class DefaultAmountBody(BaseModel):
    amount: float


@router.get("/{account}", response_model=UserDTO)
@inject
async def get_user(
    account: str,
    service: UsersService = Depends(Provide[UsersModule.users_service]),
) -> UserDTO:
    return await service.get_user(account)


@router.get("/{account}/default-amount")
@inject
async def get_default_amount(
    account: str,
    service: UsersService = Depends(Provide[UsersModule.users_service]),
) -> dict:
    return {"account": account, "amount": await service.get_default_amount(account)}


@router.put("/{account}/default-amount", response_model=UserDTO)
@inject
async def update_default_amount(
    account: str,
    body: DefaultAmountBody,
    service: UsersService = Depends(Provide[UsersModule.users_service]),
) -> UserDTO:
    try:
        return await service.update_default_amount(account, body.amount)
    except InvalidInput as e:
        raise HTTPException(status_code=422, detail=e.message) from e
    except StoreUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message) from e
