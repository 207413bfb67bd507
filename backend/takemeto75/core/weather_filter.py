"""
Destination weather filter: candidate predicate, sky classification and
distance-first ranking with backfill.
"""
import math
from typing import List, Optional

from takemeto75.data.destinations import US_AIRPORTS
from takemeto75.models import Airport, Destination, TARGET_TEMP_F, WeatherSnapshot

EARTH_RADIUS_MILES = 3959

# WeatherAPI.com condition codes
CLEAR_CODES = {1000, 1003}  # Sunny/Clear, Partly cloudy
CLOUDY_CODES = {1006}  # Cloudy, borderline

SKY_CLEAR = "clear"
SKY_CLOUDY = "cloudy"
SKY_OTHER = "other"

def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_MILES * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

def find_nearest_airport(lat: float, lon: float, airports: Optional[List[Airport]] = None) -> Airport:
    """Linear scan. On an exact tie the earlier airport in the list wins."""
    if airports is None:
        airports = US_AIRPORTS

    nearest = airports[0]
    min_dist = math.inf
    for airport in airports:
        dist = haversine_miles(lat, lon, airport.lat, airport.lon)
        if dist < min_dist:
            min_dist = dist
            nearest = airport
    return nearest

def classify_condition(code: int) -> str:
    if code in CLEAR_CODES:
        return SKY_CLEAR
    if code in CLOUDY_CODES:
        return SKY_CLOUDY
    return SKY_OTHER

def cloudy_counts_as_fair(skies: List[str]) -> bool:
    """Cloudy days only count when at least half the days are clear or partly cloudy."""
    clear = sum(1 for s in skies if s == SKY_CLEAR)
    return bool(skies) and clear * 2 >= len(skies)

def is_fair_day(sky: str, accept_cloudy: bool) -> bool:
    return sky == SKY_CLEAR or (sky == SKY_CLOUDY and accept_cloudy)

def is_mostly_sunny(skies: List[str]) -> bool:
    """A strict majority of the forecast days are fair-weather days."""
    if not skies:
        return False
    accept_cloudy = cloudy_counts_as_fair(skies)
    fair = sum(1 for s in skies if is_fair_day(s, accept_cloudy))
    return fair * 2 > len(skies)

def is_candidate(snapshot: Optional[WeatherSnapshot]) -> bool:
    return snapshot is not None and snapshot.is_in_range and snapshot.is_sunny

def temp_gap(destination: Destination) -> float:
    if destination.weather is None:
        return math.inf
    return abs(TARGET_TEMP_F - destination.weather.avg_temp)

def rank_destinations(destinations: List[Destination], origin: Airport, limit: int = 3) -> List[Destination]:
    """
    Candidates nearest-first (ties: closest to 75°F). If fewer than `limit`
    qualify, backfill with the rest ordered by closeness to 75°F, then distance.
    """
    with_distance = [
        d.model_copy(update={"distance": round(haversine_miles(origin.lat, origin.lon, d.lat, d.lon), 1)})
        for d in destinations
    ]

    candidates = sorted(
        (d for d in with_distance if is_candidate(d.weather)),
        key=lambda d: (d.distance, temp_gap(d)),
    )
    if len(candidates) >= limit:
        return candidates[:limit]

    backfill = sorted(
        (d for d in with_distance if not is_candidate(d.weather)),
        key=lambda d: (temp_gap(d), d.distance),
    )
    return (candidates + backfill)[:limit]
