"""
City autocomplete endpoint for the destination field.
"""
from fastapi import APIRouter, Depends, Query

from travel_planner.auth.dependencies import get_current_user
from travel_planner.auth.models import UserModel
from travel_planner.domain.schemas import CityResponse, CitySearchResponse
from travel_planner.infrastructure.geocoding import GeocodingService, get_geocoding_service


router = APIRouter(prefix="/places", tags=["places"])


@router.get(
    "/cities",
    response_model=CitySearchResponse,
    summary="Search cities",
    description="Up to five city candidates; queries under two characters return nothing."
)
async def search_cities(
    q: str = Query(default="", max_length=100, description="Partial city name"),
    user: UserModel = Depends(get_current_user),
    geocoding: GeocodingService = Depends(get_geocoding_service),
) -> CitySearchResponse:
    candidates = await geocoding.search_cities(q)
    return CitySearchResponse(results=[
        CityResponse(
            name=c.name,
            country=c.country,
            admin1=c.admin1,
            latitude=c.latitude,
            longitude=c.longitude,
        )
        for c in candidates
    ])
