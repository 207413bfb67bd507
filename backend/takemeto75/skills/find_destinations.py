from takemeto75.core.batching import gather_in_batches
from takemeto75.core.packages import get_travel_dates
from takemeto75.core.weather_filter import find_nearest_airport, is_candidate, rank_destinations
from takemeto75.data.destinations import DESTINATIONS, get_airport
from takemeto75.skills.affiliate import build_city_link
from takemeto75.skills.weather import get_weather_forecast
from datetime import date
from typing import Optional
import logging

logger = logging.getLogger(__name__)

async def find_destinations(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    airport_code: Optional[str] = None,
    limit: int = 3,
    today: Optional[date] = None,
) -> dict:
    """
    Weather-first destination picks for a traveler, located either by an
    airport code or by coordinates (nearest US airport).
    """
    if airport_code:
        origin = get_airport(airport_code)
    elif lat is not None and lon is not None:
        origin = find_nearest_airport(lat, lon)
    else:
        raise ValueError("airport_code or lat/lon required")

    logger.info(f"Finding destinations from {origin.code} (limit={limit})")

    # Weather for every destination, fetched in bounded batches
    factories = [lambda d=d: get_weather_forecast(d.lat, d.lon) for d in DESTINATIONS]
    forecasts = await gather_in_batches(factories)

    warnings = set()
    destinations = []
    for dest, (snapshot, warning) in zip(DESTINATIONS, forecasts):
        if warning:
            warnings.add(warning)
        destinations.append(dest.model_copy(update={"weather": snapshot}))

    ranked = rank_destinations(destinations, origin, limit)
    dates = get_travel_dates(today)
    candidates = sum(1 for d in destinations if is_candidate(d.weather))
    logger.info(f"{candidates} candidate destinations, returning {len(ranked)}")

    return {
        "user_airport": origin,
        "dates": dates,
        "destinations": [
            {
                **d.model_dump(mode="json"),
                "is_candidate": is_candidate(d.weather),
                "hotels_url": build_city_link(d.city, d.country, dates.check_in, dates.check_out),
            }
            for d in ranked
        ],
        "degraded": bool(warnings),
        "warnings": sorted(warnings),
    }
