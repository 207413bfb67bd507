from takemeto75.models import FlightOffer, HotelOffer, Selection, Tier
from takemeto75.core.tiers import get_policy, is_luxury_brand
from typing import List, Optional

def cost_adjusted_price(hotel: HotelOffer, cost_index: int = 3) -> float:
    """Hotel price weighted by destination cost of living (index 1 = cheapest)."""
    return hotel.price * (1 + (cost_index - 1) * 0.1)

def value_density(hotel: HotelOffer) -> float:
    """Review points per $100. Higher is better."""
    return (hotel.review_score / 10) / (hotel.price / 100)

def convenience_price(flight: FlightOffer) -> float:
    # 10% penalty per outbound stop
    return flight.price * (1 + flight.stops * 0.1)

def rank_flights(flights: List[FlightOffer], tier) -> List[FlightOffer]:
    """
    Order flights best-first for the tier.
    sorted() is stable, so offers with equal keys keep their input order.
    """
    tier = Tier(tier)
    if tier == Tier.BASE:
        return sorted(flights, key=lambda f: (f.price, f.stops))
    if tier == Tier.PREMIUM:
        return sorted(flights, key=convenience_price)
    return sorted(flights, key=lambda f: (f.stops, f.price))

def rank_hotels(hotels: List[HotelOffer], tier, cost_index: int = 3) -> List[HotelOffer]:
    """
    Order hotels best-first for the tier.
    Base puts well-reviewed hotels ahead of the rest and only falls back to
    the others when none qualify.
    """
    tier = Tier(tier)
    policy = get_policy(tier)

    if tier == Tier.BASE:
        key = lambda h: cost_adjusted_price(h, cost_index)
        qualified = [h for h in hotels if h.review_score >= policy.min_review_score]
        rest = [h for h in hotels if h.review_score < policy.min_review_score]
        return sorted(qualified, key=key) + sorted(rest, key=key)

    if tier == Tier.PREMIUM:
        return sorted(hotels, key=lambda h: -value_density(h))

    # Luxe: preferred brands first, then review score, then review count
    return sorted(
        hotels,
        key=lambda h: (
            0 if is_luxury_brand(h.name, policy.preferred_brands) else 1,
            -h.review_score,
            -h.review_count,
        ),
    )

def deterministic_reasoning(tier, flight: FlightOffer, hotel: HotelOffer, city: Optional[str] = None) -> str:
    tier = Tier(tier)
    place = city or "this trip"
    stops = "nonstop" if flight.stops == 0 else f"{flight.stops}-stop"

    if tier == Tier.BASE:
        return (
            f"Selected the most affordable options while keeping quality up (8.0+ hotel reviews). "
            f"{flight.airline} {stops} at ${flight.price:,.2f} and {hotel.name} at ${hotel.price:,.2f} "
            f"are the best value for {place}."
        )
    if tier == Tier.PREMIUM:
        return (
            f"Balanced comfort and cost for a premium trip to {place}. "
            f"{hotel.name} scores {hotel.review_score:.0f}/100 at a fair ${hotel.price:,.2f}, "
            f"paired with a {stops} {flight.airline} flight."
        )
    return (
        f"Selected top-tier options for a luxurious stay in {place}. "
        f"{hotel.name} is the strongest property available ({hotel.review_score:.0f}/100), "
        f"with a {stops} {flight.cabin_class.replace('_', ' ')} flight on {flight.airline}."
    )

def select_deterministic(
    flights: List[FlightOffer],
    hotels: List[HotelOffer],
    tier,
    cost_index: int = 3,
    city: Optional[str] = None,
) -> Optional[Selection]:
    """
    Pick the top flight and hotel for a tier.
    Returns None when either list is empty.
    """
    if not flights or not hotels:
        return None

    flight = rank_flights(flights, tier)[0]
    hotel = rank_hotels(hotels, tier, cost_index)[0]
    return Selection(
        flight=flight,
        hotel=hotel,
        reasoning=deterministic_reasoning(tier, flight, hotel, city),
        source="deterministic",
    )
