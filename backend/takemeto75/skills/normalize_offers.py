from takemeto75.models import FlightOffer, FlightSegment, HotelOffer, SegmentEndpoint
from takemeto75.core.tiers import get_policy, is_luxury_brand
from datetime import datetime
from typing import Optional
import logging
import math
import re

logger = logging.getLogger(__name__)

# Native review scale per hotel provider (max value)
HOTEL_REVIEW_SCALES = {
    'booking': 10,
    'duffel_stays': 10,
    'serpapi': 5,
}

AIRLINE_NAMES = {
    "AA": "American Airlines", "DL": "Delta Air Lines", "UA": "United Airlines",
    "B6": "JetBlue Airways", "AS": "Alaska Airlines", "WN": "Southwest Airlines",
    "NK": "Spirit Airlines", "F9": "Frontier Airlines", "HA": "Hawaiian Airlines",
    "AC": "Air Canada", "AM": "Aeromexico", "CM": "Copa Airlines", "AV": "Avianca",
    "LA": "LATAM Airlines", "BA": "British Airways", "IB": "Iberia", "TP": "TAP Air Portugal",
    "AF": "Air France", "KL": "KLM", "LH": "Lufthansa", "AZ": "ITA Airways",
    "EK": "Emirates", "QR": "Qatar Airways", "SQ": "Singapore Airlines",
    "NH": "ANA", "JL": "Japan Airlines", "KE": "Korean Air", "CI": "China Airlines",
    "QF": "Qantas",
}

_ISO_DURATION = re.compile(r'P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?)?')
_HUMAN_DURATION = re.compile(r'(?:(\d+)\s*h)?\s*(?:(\d+)\s*m)?', re.IGNORECASE)

def parse_duration(text: str) -> int:
    """Parse ISO 8601 (PT4H30M, P1DT2H) or human ("4h 30m") durations to minutes."""
    if not text:
        return 0
    text = text.strip()
    match = _ISO_DURATION.fullmatch(text)
    if match:
        d, h, m = (int(g or 0) for g in match.groups())
        return d * 1440 + h * 60 + m
    match = _HUMAN_DURATION.fullmatch(text)
    if match:
        h, m = (int(g or 0) for g in match.groups())
        return h * 60 + m
    return 0

def format_duration(minutes: int) -> str:
    return f"{minutes // 60}h {minutes % 60}m"

def parse_timestamp(value: str) -> datetime:
    # fromisoformat only accepts a trailing Z from 3.11 on
    return datetime.fromisoformat(value.replace('Z', '+00:00'))

def parse_price(value) -> float:
    """Positive finite float, else ValueError."""
    price = float(value)
    if not math.isfinite(price) or price <= 0:
        raise ValueError(f"unusable price {value!r}")
    return price

def _optional_price(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return parse_price(value)
    except (TypeError, ValueError):
        return None

def span_minutes(departing: datetime, arriving: datetime, provider_duration: str = "") -> int:
    """
    Minutes between first departure and last arrival. The provider's own
    duration string is only used when the timestamps cannot be compared.
    """
    try:
        minutes = int((arriving - departing).total_seconds() // 60)
    except TypeError:
        # naive vs aware
        minutes = -1
    if minutes < 0:
        minutes = parse_duration(provider_duration)
    return minutes

def normalize_review_score(value, scale: Optional[int] = None) -> float:
    """
    Rescale a review score to 0-100. With no declared scale, values <= 10 are
    assumed to be on a 0-10 scale.
    """
    try:
        score = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(score) or score <= 0:
        return 0.0
    if scale is None:
        scale = 10 if score <= 10 else 100
    return round(min(score * 100 / scale, 100.0), 1)

def _star_rating(value, default: int = 3) -> int:
    try:
        stars = int(float(value))
    except (TypeError, ValueError):
        return default
    return min(max(stars, 1), 5) if stars else default

def _nightly(price: float, nights: Optional[int]) -> Optional[float]:
    return round(price / nights, 2) if nights else None

# ---------------------------------------------------------------- flights

def _duffel_slice(slice_: dict) -> FlightSegment:
    segments = slice_['segments']
    first, last = segments[0], segments[-1]
    departing = parse_timestamp(first['departing_at'])
    arriving = parse_timestamp(last['arriving_at'])
    provider_duration = slice_.get('duration') or first.get('duration') or ''
    minutes = span_minutes(departing, arriving, provider_duration)
    carrier = first.get('operating_carrier') or first.get('marketing_carrier') or {}
    number = first.get('operating_carrier_flight_number') or first.get('marketing_carrier_flight_number') or ''

    return FlightSegment(
        departure=SegmentEndpoint(airport=first['origin']['iata_code'], time=departing),
        arrival=SegmentEndpoint(airport=last['destination']['iata_code'], time=arriving),
        duration=format_duration(minutes),
        duration_minutes=minutes,
        stops=len(segments) - 1,
        carrier=carrier.get('name', ''),
        flight_number=f"{carrier.get('iata_code', '')}{number}",
    )

def normalize_duffel_offer(raw: dict, markup: float) -> FlightOffer:
    price = parse_price(raw['total_amount'])
    slices = raw['slices']
    passengers = raw.get('passengers') or []
    has_baggage = any(
        b.get('type') == 'checked' and (b.get('quantity') or 0) > 0
        for p in passengers
        for b in (p.get('baggages') or [])
    )
    refund = ((raw.get('conditions') or {}).get('refund_before_departure') or {}).get('allowed')

    return FlightOffer(
        id=raw['id'],
        source='duffel',
        price=round(price + markup, 2),
        base_price=price,
        currency=raw.get('total_currency') or 'USD',
        airline=raw['owner']['name'],
        airline_logo=raw['owner'].get('logo_symbol_url'),
        outbound=_duffel_slice(slices[0]),
        inbound=_duffel_slice(slices[1]) if len(slices) > 1 else None,
        cabin_class=(passengers[0].get('cabin_class') if passengers else None) or 'economy',
        baggage_included=has_baggage,
        refundable=bool(refund),
    )

def extract_cabin(raw: dict) -> str:
    """Cabin of the first fare segment, lower-cased. Defaults to economy."""
    tps = raw.get('travelerPricings') or []
    if not tps:
        return "economy"
    fds = tps[0].get('fareDetailsBySegment') or []
    if not fds:
        return "economy"
    return (fds[0].get('cabin') or "ECONOMY").lower()

def _amadeus_itinerary(itinerary: dict, carriers: dict) -> FlightSegment:
    segments = itinerary['segments']
    first, last = segments[0], segments[-1]
    departing = parse_timestamp(first['departure']['at'])
    arriving = parse_timestamp(last['arrival']['at'])
    minutes = span_minutes(departing, arriving, itinerary.get('duration', ''))
    code = first['carrierCode']

    return FlightSegment(
        departure=SegmentEndpoint(airport=first['departure']['iataCode'], time=departing),
        arrival=SegmentEndpoint(airport=last['arrival']['iataCode'], time=arriving),
        duration=format_duration(minutes),
        duration_minutes=minutes,
        stops=len(segments) - 1,
        carrier=AIRLINE_NAMES.get(code) or carriers.get(code, code).title(),
        flight_number=f"{code}{first['number']}",
    )

def normalize_amadeus_offer(raw: dict, markup: float) -> FlightOffer:
    price_info = raw['price']
    price = parse_price(price_info.get('grandTotal') or price_info['total'])
    carriers = raw.get('_carriers') or {}
    itineraries = raw['itineraries']
    outbound = _amadeus_itinerary(itineraries[0], carriers)
    validating = (raw.get('validatingAirlineCodes') or [None])[0] or itineraries[0]['segments'][0]['carrierCode']

    fare_details = []
    for tp in raw.get('travelerPricings') or []:
        fare_details.extend(tp.get('fareDetailsBySegment') or [])
    has_baggage = any(
        ((fd.get('includedCheckedBags') or {}).get('quantity') or 0) > 0
        or ((fd.get('includedCheckedBags') or {}).get('weight') or 0) > 0
        for fd in fare_details
    )

    return FlightOffer(
        id=str(raw['id']),
        source='amadeus',
        price=round(price + markup, 2),
        base_price=price,
        currency=price_info.get('currency') or 'USD',
        airline=AIRLINE_NAMES.get(validating, outbound.carrier),
        outbound=outbound,
        inbound=_amadeus_itinerary(itineraries[1], carriers) if len(itineraries) > 1 else None,
        cabin_class=extract_cabin(raw),
        baggage_included=has_baggage,
        refundable=bool((raw.get('pricingOptions') or {}).get('refundableFare', False)),
    )

FLIGHT_NORMALIZERS = {
    'duffel': normalize_duffel_offer,
    'amadeus': normalize_amadeus_offer,
}

def normalize_flight(raw: dict, tier) -> FlightOffer:
    """Dispatch on the `_source` tag. Price includes the tier's flight markup."""
    source = raw.get('_source')
    normalizer = FLIGHT_NORMALIZERS.get(source)
    if normalizer is None:
        raise ValueError(f"unknown flight source {source!r}")
    return normalizer(raw, get_policy(tier).markup)

def _origin(raw) -> str:
    if not isinstance(raw, dict):
        return f"<{type(raw).__name__}>"
    return f"{raw.get('id')} from {raw.get('_source')}"

def normalize_flights(raw_offers: list[dict], tier) -> list[FlightOffer]:
    normalized = []
    for raw in raw_offers:
        try:
            normalized.append(normalize_flight(raw, tier))
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            # Skip malformed offers, keep the rest
            logger.warning(f"Dropping flight offer {_origin(raw)}: {e}")
    return normalized

# ---------------------------------------------------------------- hotels

def normalize_booking_hotel(raw: dict, nights: Optional[int] = None) -> Optional[HotelOffer]:
    products = raw.get('products') or []
    if not products:
        return None
    product = products[0]
    price_info = product.get('price') or {}
    price = _optional_price(price_info.get('total'))
    if price is None:
        return None

    name = raw['name']
    distance = raw.get('distance_to_city_centre')
    return HotelOffer(
        id=str(raw['id']),
        source='booking',
        name=name,
        star_rating=_star_rating(raw.get('class')),
        review_score=normalize_review_score(raw.get('review_score'), HOTEL_REVIEW_SCALES['booking']),
        review_count=int(raw.get('number_of_reviews') or 0),
        price=price,
        currency=price_info.get('currency') or raw.get('currency') or 'USD',
        address=raw.get('address') or '',
        distance_from_center=f"{distance['value']} {distance['unit']} from center" if distance else '',
        photos=[p['url'] for p in raw.get('photos') or [] if p.get('url')],
        amenities=[f['name'] for f in raw.get('facilities') or [] if f.get('name')],
        room_type=product.get('room_name') or '',
        product_id=str(product['id']) if product.get('id') is not None else None,
        free_cancellation=(product.get('cancellation') or {}).get('type') == 'free_cancellation',
        breakfast_included='breakfast' in (product.get('meal_plan') or '').lower(),
        url=raw.get('url') or '',
        is_luxury_brand=is_luxury_brand(name),
        nightly_rate=_nightly(price, nights),
    )

def normalize_duffel_stay(raw: dict, nights: Optional[int] = None) -> Optional[HotelOffer]:
    price = _optional_price(raw.get('cheapest_rate_total_amount'))
    if price is None:
        return None

    accommodation = raw['accommodation']
    name = accommodation['name']
    address = ((accommodation.get('location') or {}).get('address') or {})
    return HotelOffer(
        id=str(raw['id']),
        source='duffel_stays',
        name=name,
        star_rating=_star_rating(accommodation.get('rating'), default=4),
        review_score=normalize_review_score(accommodation.get('review_score'), HOTEL_REVIEW_SCALES['duffel_stays']),
        review_count=int(accommodation.get('review_count') or 0),
        price=price,
        currency=raw.get('cheapest_rate_currency') or 'USD',
        address=address.get('line_one') or '',
        photos=[p['url'] for p in accommodation.get('photos') or [] if p.get('url')],
        amenities=[a['description'] for a in accommodation.get('amenities') or [] if a.get('description')],
        room_type='Standard Room',
        free_cancellation=True,
        is_luxury_brand=is_luxury_brand(name),
        nightly_rate=_nightly(price, nights),
    )

def normalize_serpapi_hotel(raw: dict, nights: Optional[int] = None) -> Optional[HotelOffer]:
    total = (raw.get('total_rate') or {}).get('extracted_lowest')
    if total is None and nights:
        nightly = (raw.get('rate_per_night') or {}).get('extracted_lowest')
        total = nightly * nights if isinstance(nightly, (int, float)) else None
    price = _optional_price(total)
    if price is None:
        return None

    name = raw['name']
    return HotelOffer(
        id=str(raw.get('property_token') or f"serp_{name}"),
        source='serpapi',
        name=name,
        star_rating=_star_rating(raw.get('extracted_hotel_class')),
        review_score=normalize_review_score(raw.get('overall_rating'), HOTEL_REVIEW_SCALES['serpapi']),
        review_count=int(raw.get('reviews') or 0),
        price=price,
        currency=raw.get('_currency') or 'USD',
        address=raw.get('description') or '',
        photos=[img['thumbnail'] for img in raw.get('images') or [] if img.get('thumbnail')],
        amenities=list(raw.get('amenities') or []),
        room_type=raw.get('type') or '',
        free_cancellation=bool(raw.get('free_cancellation')),
        breakfast_included=any('breakfast' in a.lower() for a in raw.get('amenities') or []),
        url=raw.get('link') or '',
        is_luxury_brand=is_luxury_brand(name),
        nightly_rate=_nightly(price, nights),
    )

HOTEL_NORMALIZERS = {
    'booking': normalize_booking_hotel,
    'duffel_stays': normalize_duffel_stay,
    'serpapi': normalize_serpapi_hotel,
}

def normalize_hotel(raw: dict, nights: Optional[int] = None) -> Optional[HotelOffer]:
    """
    Dispatch on the `_source` tag. Returns None when the property has no
    price-bearing product, which callers filter out.
    """
    source = raw.get('_source')
    normalizer = HOTEL_NORMALIZERS.get(source)
    if normalizer is None:
        raise ValueError(f"unknown hotel source {source!r}")
    return normalizer(raw, nights)

def normalize_hotels(raw_hotels: list[dict], nights: Optional[int] = None) -> list[HotelOffer]:
    normalized = []
    for raw in raw_hotels:
        try:
            hotel = normalize_hotel(raw, nights)
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Dropping hotel {_origin(raw)}: {e}")
            continue
        if hotel is None:
            logger.info(f"Skipping hotel {raw.get('id') or raw.get('name')}: no bookable rate")
            continue
        normalized.append(hotel)
    return normalized
