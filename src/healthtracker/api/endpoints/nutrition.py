"""
Nutrition Endpoints

Server-side proxy for USDA FoodData Central food search.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from healthtracker.api.dependencies import get_usda_client
from healthtracker.infrastructure.nutrition import UsdaApiError, UsdaClient

router = APIRouter()


@router.get("/usda", summary="Search USDA FoodData Central")
async def search_usda(
    query: Optional[str] = None,
    client: UsdaClient = Depends(get_usda_client),
) -> dict:
    if not query or not query.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter is required",
        )

    try:
        return await client.search_foods(query.strip())
    except UsdaApiError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e),
        ) from e
