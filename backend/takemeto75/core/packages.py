from takemeto75.config import settings
from takemeto75.core.tiers import get_policy
from takemeto75.models import Destination, FlightOffer, HotelOffer, PriceBreakdown, Tier, TravelDates, TripPackage
from datetime import date, timedelta
from typing import Optional
import secrets
import time

def generate_id(prefix: str, *parts: str) -> str:
    """prefix_<ms timestamp>[_part...]_<random hex>"""
    pieces = [prefix, str(int(time.time() * 1000)), *parts, secrets.token_hex(4)]
    return "_".join(pieces)

def _display(day: date) -> str:
    # "Fri, Dec 27" (no zero padding)
    return f"{day:%a, %b} {day.day}"

def get_travel_dates(today: Optional[date] = None, nights: Optional[int] = None) -> TravelDates:
    """Check in tomorrow, check out `nights` later."""
    today = today or date.today()
    nights = nights or settings.TRIP_NIGHTS
    check_in = today + timedelta(days=1)
    check_out = check_in + timedelta(days=nights)
    return TravelDates(
        check_in=check_in,
        check_out=check_out,
        check_in_display=_display(check_in),
        check_out_display=_display(check_out),
        nights=nights,
    )

def assemble(
    destination: Destination,
    dates: TravelDates,
    tier,
    flight: FlightOffer,
    hotel: HotelOffer,
    reasoning: str,
    reasoning_source: str = "deterministic",
    degraded: bool = False,
) -> TripPackage:
    """Price a selected flight + hotel into an immutable package."""
    tier = Tier(tier)
    markup = get_policy(tier).markup
    return TripPackage(
        id=generate_id("pkg", tier.value),
        tier=tier,
        # Snapshots, so later changes to the inputs never leak into the package
        destination=destination.model_copy(deep=True),
        dates=dates.model_copy(),
        flight=flight.model_copy(deep=True),
        hotel=hotel.model_copy(deep=True),
        total_price=round(flight.price + hotel.price + markup, 2),
        currency=settings.CURRENCY,
        breakdown=PriceBreakdown(flight=flight.price, hotel=hotel.price, markup=markup),
        reasoning=reasoning,
        reasoning_source=reasoning_source,
        degraded=degraded,
    )
