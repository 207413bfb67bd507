"""
Short destination pitch plus rough per-tier price ranges for the trip cards.

Ranges come from fixed flight + hotel price bands scaled by how far the
destination country is. The pitch comes from the advisor when one is
configured, otherwise (or when it fails) from a template.
"""
from takemeto75.config import settings
from takemeto75.core import ai
from takemeto75.core.selector import extract_json_object
from takemeto75.data.destinations import get_airport, get_destination
from takemeto75.models import Destination, Tier
from datetime import date
from typing import Optional
import asyncio
import logging
import math

logger = logging.getLogger(__name__)

DOMESTIC = {"USA", "Mexico", "Canada"}
CARIBBEAN = {"Puerto Rico", "Dominican Republic", "Jamaica", "Bahamas", "Aruba"}
LONG_HAUL = {"Thailand", "Vietnam", "Indonesia", "South Africa", "Australia", "Japan"}

# (low, high) as flight + 3-night hotel, before the distance multiplier
PRICE_BANDS = {
    Tier.BASE: (280 + 300, 400 + 450),
    Tier.PREMIUM: (450 + 600, 700 + 900),
    Tier.LUXE: (950 + 1500, 1400 + 2400),
}

def flight_multiplier(country: str) -> float:
    if country in DOMESTIC:
        return 1.0
    if country in CARIBBEAN:
        return 1.2
    if country in LONG_HAUL:
        return 2.0
    # Europe, South America, everything else
    return 1.5

def _round_to_100(amount: float) -> int:
    # half-up, so 850 -> 900
    return int(math.floor(amount / 100 + 0.5)) * 100

def price_ranges(country: str) -> dict:
    """{"base": "$700-1,000", ...} for a trip to `country`."""
    multiplier = flight_multiplier(country)
    ranges = {}
    for tier, (low, high) in PRICE_BANDS.items():
        ranges[tier.value] = f"${_round_to_100(low * multiplier):,}-{_round_to_100(high * multiplier):,}"
    return ranges

def season_hook(today: date) -> str:
    if today.month in (12, 1):
        return "Post-holiday deals available."
    if 6 <= today.month <= 9:
        return "Peak season - book early!"
    return "Shoulder season pricing in effect."

def template_summary(destination: Destination, today: date) -> str:
    blurb = destination.blurb.rstrip(".")
    blurb = blurb[:1].lower() + blurb[1:]
    return (
        f"{destination.city} offers {blurb}. Perfect weather awaits with temperatures near 75°F. "
        f"{season_hook(today)}"
    )

def build_summary_prompt(destination: Destination, origin_code: str, today: date, prices: dict) -> str:
    return "\n".join([
        f"Generate a SHORT trip summary for {destination.city}, {destination.country} "
        f"for someone flying from {origin_code}. Current month: {today:%B}.",
        "",
        "STRICT: Maximum 2 sentences, under 40 words total. Be punchy and enticing.",
        "",
        'Include ONE timing hook naturally: "post-holiday lull" (Dec/Jan), "shoulder season pricing" '
        '(Mar-May, Sep-Nov), "peak season" (Jun-Aug), or "off-peak deals".',
        "",
        "Price ranges shown to the traveler for a 3-night trip:",
        f"- Base: {prices['base']} (economy flights, 3-star hotels)",
        f"- Premium: {prices['premium']} (economy/premium economy, 4-star hotels)",
        f"- Luxe: {prices['luxe']} (business class, 5-star luxury hotels)",
        "",
        "Respond in this exact JSON format:",
        '{"summary": "<2 short sentences, max 40 words>"}',
    ])

async def _advisor_summary(prompt: str) -> Optional[str]:
    timeout = settings.ADVISOR_TIMEOUT_SECONDS
    try:
        reply = await asyncio.wait_for(ai.complete(prompt), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Summary advisor timed out after {timeout}s")
        return None
    except Exception as e:
        logger.error(f"Summary advisor error: {e}")
        return None

    payload = extract_json_object(reply)
    summary = payload.get("summary") if payload else None
    if not isinstance(summary, str) or not summary.strip():
        logger.warning("Summary advisor reply had no usable summary")
        return None
    return summary.strip()

async def summarize_destination(
    destination_city: str,
    origin_code: str = "SFO",
    today: Optional[date] = None,
) -> dict:
    """
    Pitch + price ranges for one destination. Never fails on advisor
    problems; raises UnknownAirport / UnknownDestination for bad input.
    """
    origin = get_airport(origin_code)
    destination = get_destination(destination_city)
    today = today or date.today()
    prices = price_ranges(destination.country)

    summary = None
    if ai.has_credentials():
        summary = await _advisor_summary(build_summary_prompt(destination, origin.code, today, prices))

    source = "advisor" if summary else "template"
    if summary is None:
        summary = template_summary(destination, today)

    logger.info(f"Summary for {destination.city} from {origin.code} ({source})")
    return {
        "destination": destination.city,
        "country": destination.country,
        "summary": summary,
        "prices": prices,
        "source": source,
    }
