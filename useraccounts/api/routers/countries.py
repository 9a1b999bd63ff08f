"""
Countries routes.

Read-only access to the postal code reference table.
"""

from fastapi import APIRouter, Depends, Path

from useraccounts.api.dependencies import get_country_service
from useraccounts.api.models import CountryResponse, ErrorResponse
from useraccounts.domain.countries import CountryService

router = APIRouter(prefix="/countries", tags=["Countries"])


@router.get(
    "",
    response_model=list[CountryResponse],
    summary="List countries",
    description="All supported countries with their postal code pattern and regexp, ordered by name.",
)
def list_countries(
    service: CountryService = Depends(get_country_service),
) -> list[CountryResponse]:
    return [CountryResponse.from_domain(country) for country in service.list_countries()]


@router.get(
    "/{abbrev}",
    response_model=CountryResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown country code"}},
    summary="Get country by code",
)
def get_country(
    abbrev: str = Path(..., min_length=2, max_length=2, description="Country code (eg. FI)."),
    service: CountryService = Depends(get_country_service),
) -> CountryResponse:
    return CountryResponse.from_domain(service.get_country(abbrev))
