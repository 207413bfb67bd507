from takemeto75.core.cache import package_cache
from takemeto75.core.packages import assemble, get_travel_dates
from takemeto75.core.selector import SelectionRequest, select_best
from takemeto75.core.tiers import get_policy
from takemeto75.core.weather_filter import haversine_miles
from takemeto75.data.destinations import get_airport, get_destination
from takemeto75.models import Destination, Tier, TravelDates, TripPackage
from takemeto75.skills.normalize_offers import normalize_flights, normalize_hotels
from takemeto75.skills.search_hotels import search_hotels
from takemeto75.skills.search_offers import search_flights
from takemeto75.skills.weather import get_weather_forecast
from datetime import date
from typing import List, Optional
import asyncio
import logging

logger = logging.getLogger(__name__)

ALL_TIERS = [Tier.BASE, Tier.PREMIUM, Tier.LUXE]

async def build_tier_package(
    origin_code: str,
    destination: Destination,
    dates: TravelDates,
    tier: Tier,
    selector=None,
) -> tuple[Optional[TripPackage], list[str]]:
    """
    Search, normalize, select and price one tier.
    Returns (package or None when nothing is available, warnings).
    """
    policy = get_policy(tier)

    # Flights and hotels for the same tier run concurrently
    (raw_flights, flight_warning), (raw_hotels, hotel_warning) = await asyncio.gather(
        search_flights(origin_code, destination.airport, dates.check_in, dates.check_out, 1, policy.cabin_class),
        search_hotels(
            destination.city, destination.lat, destination.lon, dates.check_in, dates.check_out,
            guests=2, rooms=1, star_ratings=policy.hotel_stars, min_review_score=policy.min_review_score,
        ),
    )
    warnings = [w for w in (flight_warning, hotel_warning) if w]

    flights = normalize_flights(raw_flights, tier)
    hotels = normalize_hotels(raw_hotels, nights=dates.nights)

    # Providers that can't filter by class server-side
    in_band = [h for h in hotels if h.star_rating in policy.hotel_stars]
    if in_band:
        hotels = in_band

    if not flights or not hotels:
        logger.info(f"No {tier.value} options for {destination.city}: {len(flights)} flights, {len(hotels)} hotels")
        return None, warnings

    selection = await select_best(
        SelectionRequest(destination=destination, dates=dates, tier=tier, flights=flights, hotels=hotels),
        selector,
    )
    if selection is None:
        return None, warnings

    package = assemble(
        destination, dates, tier, selection.flight, selection.hotel, selection.reasoning,
        reasoning_source=selection.source,
        degraded=bool(warnings),
    )
    package_cache.put(package)
    logger.info(f"Built {tier.value} package {package.id}: ${package.total_price:,.2f}")
    return package, warnings

async def build_packages(
    origin_code: str,
    destination_city: str,
    tiers: Optional[List[Tier]] = None,
    today: Optional[date] = None,
    selector=None,
    nights: Optional[int] = None,
) -> dict:
    """
    Best package per requested tier for one destination, for a stay of
    `nights` (TRIP_NIGHTS when omitted). Tiers are built concurrently.
    Raises UnknownAirport / UnknownDestination for bad input.
    """
    origin = get_airport(origin_code)
    base = get_destination(destination_city)
    tiers = [Tier(t) for t in (tiers or ALL_TIERS)]
    dates = get_travel_dates(today, nights)

    weather, weather_warning = await get_weather_forecast(base.lat, base.lon)
    destination = base.model_copy(update={
        "weather": weather,
        "distance": round(haversine_miles(origin.lat, origin.lon, base.lat, base.lon), 1),
    })

    results = await asyncio.gather(*(
        build_tier_package(origin.code, destination, dates, tier, selector) for tier in tiers
    ))

    warnings = {weather_warning} if weather_warning else set()
    packages = {}
    unavailable = []
    for tier, (package, tier_warnings) in zip(tiers, results):
        warnings.update(tier_warnings)
        if package is None:
            unavailable.append(tier.value)
        else:
            packages[tier.value] = package

    return {
        "destination": destination,
        "dates": dates,
        "packages": packages,
        "unavailable": unavailable,
        "degraded": bool(warnings),
        "warnings": sorted(warnings),
    }
