from takemeto75.config import settings
from takemeto75.core.weather_filter import classify_condition, cloudy_counts_as_fair, is_fair_day, is_mostly_sunny, SKY_CLEAR, SKY_CLOUDY, SKY_OTHER
from takemeto75.models import DayForecast, WeatherSnapshot
from datetime import date, timedelta
from typing import Optional
import httpx
import logging
import random

logger = logging.getLogger(__name__)

WEATHER_BASE_URL = "https://api.weatherapi.com/v1"
MIN_FORECAST_DAYS = 5
MAX_FORECAST_DAYS = 7

def snapshot_from_forecast(data: dict) -> WeatherSnapshot:
    """Build a snapshot from a WeatherAPI.com forecast.json body."""
    days = data["forecast"]["forecastday"][:MAX_FORECAST_DAYS]
    if not days:
        raise ValueError("forecast has no days")

    skies = [classify_condition(day["day"]["condition"]["code"]) for day in days]
    accept_cloudy = cloudy_counts_as_fair(skies)
    avg_temp = round(sum(day["day"]["avgtemp_f"] for day in days) / len(days))

    forecast = [
        DayForecast(
            date=day["date"],
            high=round(day["day"]["maxtemp_f"]),
            low=round(day["day"]["mintemp_f"]),
            condition=day["day"]["condition"]["text"],
            is_sunny=is_fair_day(sky, accept_cloudy),
        )
        for day, sky in zip(days, skies)
    ]
    current = data.get("current") or {}
    return WeatherSnapshot(
        avg_temp=avg_temp,
        condition=(current.get("condition") or {}).get("text") or forecast[0].condition,
        is_sunny=is_mostly_sunny(skies),
        humidity=current.get("humidity"),
        forecast=forecast,
    )

async def fetch_forecast(lat: float, lon: float, days: int) -> dict:
    async with httpx.AsyncClient(base_url=WEATHER_BASE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        resp = await client.get("/forecast.json", params={
            "key": settings.WEATHER_API_KEY,
            "q": f"{lat},{lon}",
            "days": days,
            "aqi": "no",
        })
        resp.raise_for_status()
        return resp.json()

_MOCK_SKIES = {
    SKY_CLEAR: ("Sunny", "Partly cloudy"),
    SKY_CLOUDY: ("Cloudy",),
    SKY_OTHER: ("Patchy rain possible", "Overcast", "Light rain shower"),
}

def mock_weather(lat: float, lon: float, days: int = MAX_FORECAST_DAYS, today: Optional[date] = None) -> WeatherSnapshot:
    """
    Latitude-based sample forecast: warmer near the equator, hemisphere-aware
    season. Seeded by location and day so a request sees stable numbers.
    """
    today = today or date.today()
    rng = random.Random(f"{lat:.3f},{lon:.3f},{today}")

    base_temp = 85 - abs(lat) * 0.8
    southern = lat < 0
    month = today.month
    summer = (month >= 11 or month <= 3) if southern else (5 <= month <= 9)
    avg_temp = round(base_temp + (rng.random() - 0.5) * 10 + (5 if summer else -5))

    fair_weather = rng.random() > 0.3
    skies = []
    forecast = []
    for i in range(days):
        if fair_weather:
            sky = SKY_CLEAR if rng.random() > 0.2 else SKY_CLOUDY
        else:
            sky = SKY_OTHER if rng.random() > 0.3 else SKY_CLOUDY
        skies.append(sky)
        swing = (rng.random() - 0.5) * 6
        forecast.append({
            "date": str(today + timedelta(days=i)),
            "high": round(avg_temp + 5 + swing),
            "low": round(avg_temp - 8 + swing),
            "condition": rng.choice(_MOCK_SKIES[sky]),
        })

    accept_cloudy = cloudy_counts_as_fair(skies)
    return WeatherSnapshot(
        avg_temp=avg_temp,
        condition=forecast[0]["condition"],
        is_sunny=is_mostly_sunny(skies),
        humidity=40 + rng.randrange(40),
        forecast=[DayForecast(is_sunny=is_fair_day(sky, accept_cloudy), **day) for day, sky in zip(forecast, skies)],
    )

async def get_weather_forecast(lat: float, lon: float, days: int = MAX_FORECAST_DAYS) -> tuple[WeatherSnapshot, str | None]:
    """
    Returns (snapshot, warning). Falls back to sample weather when WeatherAPI
    is not configured or fails.
    """
    days = max(MIN_FORECAST_DAYS, min(days, MAX_FORECAST_DAYS))

    if settings.WEATHER_API_KEY:
        try:
            return snapshot_from_forecast(await fetch_forecast(lat, lon, days)), None
        except (httpx.HTTPError, KeyError, ValueError, TypeError) as e:
            logger.error(f"WeatherAPI error for {lat},{lon}: {e}")
            return mock_weather(lat, lon, days), "Weather is sample data (WeatherAPI unavailable)"

    return mock_weather(lat, lon, days), "Weather is sample data (no weather provider configured)"
