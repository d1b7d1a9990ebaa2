from typing import List

from fastapi import APIRouter, Depends, HTTPException
from dependency_injector.wiring import inject, Provide

from swipetrade.domain.tokens.dtos.token_dto import TokenCardDTO
from swipetrade.domain.tokens.token_service import TokenService
from swipetrade.domain.tokens.tokens_module import TokensModule


router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.get("/trending", response_model=List[TokenCardDTO], summary="Trending Raydium tokens")
@inject
async def get_trending(
    service: TokenService = Depends(Provide[TokensModule.token_service]),
) -> List[TokenCardDTO]:
    return [service.to_card(t) for t in await service.get_trending_tokens()]


@router.get("/{address}", response_model=TokenCardDTO)
@inject
async def get_token(
    address: str,
    service: TokenService = Depends(Provide[TokensModule.token_service]),
) -> TokenCardDTO:
    token = await service.get_token(address)
    if token is None:
        raise HTTPException(status_code=404, detail=f"Token '{address}' not found")
    return service.to_card(token)
