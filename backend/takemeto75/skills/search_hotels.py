from serpapi import GoogleSearch
from takemeto75.config import settings
from takemeto75.models import HotelOffer, PassengerInfo
from takemeto75.skills.affiliate import build_deep_link
from datetime import date
from typing import Iterable, Optional
import asyncio
import httpx
import logging
import random

logger = logging.getLogger(__name__)

BOOKING_BASE_URL = "https://demandapi.booking.com/3.1"
DUFFEL_BASE_URL = "https://api.duffel.com"

def _booking_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=BOOKING_BASE_URL,
        headers={
            "Authorization": f"Bearer {settings.BOOKING_API_KEY}",
            "X-Affiliate-Id": settings.BOOKING_AFFILIATE_ID,
            "Content-Type": "application/json",
        },
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

async def search_booking(lat: float, lon: float, check_in: date, check_out: date, guests: int, rooms: int, star_ratings: Iterable[int], min_review_score: int) -> list[dict]:
    payload = {
        "booker": {"country": "us", "platform": "desktop"},
        "checkin": str(check_in),
        "checkout": str(check_out),
        "guests": {"number_of_adults": guests, "number_of_rooms": rooms},
        "coordinates": {"latitude": lat, "longitude": lon, "radius": 15},
        "filters": {
            "class": sorted(star_ratings),
            # Booking.com reviews are 0-10
            "review_score": {"min": min_review_score / 10},
        },
        "extras": ["products", "photos", "facilities"],
    }
    async with _booking_client() as client:
        resp = await client.post("/accommodations/search", json=payload)
        resp.raise_for_status()
        hotels = resp.json().get("data") or []

    for hotel in hotels:
        hotel["_source"] = "booking"
    return hotels

async def search_duffel_stays(lat: float, lon: float, check_in: date, check_out: date, guests: int, rooms: int) -> list[dict]:
    payload = {
        "data": {
            "rooms": rooms,
            "location": {
                "radius": 10,
                "geographic_coordinates": {"latitude": lat, "longitude": lon},
            },
            "check_in_date": str(check_in),
            "check_out_date": str(check_out),
            "guests": [{"type": "adult"} for _ in range(guests)],
        }
    }
    async with httpx.AsyncClient(base_url=DUFFEL_BASE_URL, timeout=settings.HTTP_TIMEOUT_SECONDS) as client:
        resp = await client.post("/stays/search", json=payload, headers={
            "Authorization": f"Bearer {settings.DUFFEL_API_TOKEN}",
            "Duffel-Version": "v2",
            "Content-Type": "application/json",
        })
        resp.raise_for_status()
        data = resp.json().get("data") or {}

    results = data.get("results", []) if isinstance(data, dict) else data
    for result in results:
        result["_source"] = "duffel_stays"
    return results

def search_serpapi_hotels(city: str, check_in: date, check_out: date, guests: int, star_ratings: Iterable[int], min_review_score: int) -> list[dict]:
    """Google Hotels via SerpApi. Blocking, run it in a worker thread."""
    params = {
        "engine": "google_hotels",
        "q": f"{city} hotels",
        "check_in_date": str(check_in),
        "check_out_date": str(check_out),
        "adults": guests,
        "currency": settings.CURRENCY,
        "gl": "us",
        "hl": "en",
        "hotel_class": ",".join(str(s) for s in sorted(star_ratings)),
        # Google ratings are 0-5; 8 = "4.0+"
        "rating": 8 if min_review_score >= 80 else 7,
        "api_key": settings.SERPAPI_KEY,
    }
    data = GoogleSearch(params).get_dict()
    if "error" in data:
        raise ValueError(data["error"])

    properties = data.get("properties") or []
    for prop in properties:
        prop["_source"] = "serpapi"
        prop["_currency"] = settings.CURRENCY
    return properties

# (name template, stars, base nightly rate)
MOCK_HOTEL_TEMPLATES = [
    ("Four Seasons Resort {city}", 5, 520),
    ("Grand Plaza Hotel", 5, 350),
    ("The Ritz Downtown", 5, 450),
    ("Harbor View Suites", 4, 220),
    ("City Center Inn", 4, 180),
    ("Comfort Stay Hotel", 3, 120),
    ("Budget Express", 3, 95),
]

MOCK_FACILITIES = ["Free WiFi", "Pool", "Fitness center", "Restaurant", "Bar", "Spa", "Room service", "Airport shuttle"]

def mock_hotels(city: str, check_in: date, check_out: date, star_ratings: Iterable[int]) -> list[dict]:
    """Booking.com-shaped sample properties, seeded by city and dates."""
    stars = set(star_ratings)
    nights = max((check_out - check_in).days, 1)
    rng = random.Random(f"{city}-{check_in}-{check_out}")
    slug = city.lower().replace(" ", "-")
    hotels = []

    for i, (template, klass, base_rate) in enumerate(MOCK_HOTEL_TEMPLATES):
        # Draw for every template so each hotel's numbers don't depend on the star filter
        nightly = round(base_rate * (0.8 + rng.random() * 0.4))
        review = round(8.0 + rng.random() * 1.5, 1)
        reviews = 100 + rng.randrange(900)
        distance = round(0.2 + rng.random() * 4, 1)
        facilities = rng.sample(MOCK_FACILITIES, klass)
        if klass not in stars:
            continue

        name = template.format(city=city)
        premium = klass >= 4
        hotels.append({
            "_source": "booking",
            "id": 1000000 + i,
            "name": name,
            "class": klass,
            "review_score": review,
            "number_of_reviews": reviews,
            "address": f"{100 + i * 10} Main Street, {city}",
            "currency": settings.CURRENCY,
            "url": f"https://www.booking.com/hotel/{slug}/{name.lower().replace(' ', '-')}.html",
            "photos": [{"url": f"https://picsum.photos/seed/{slug}-{i}/400/300"}],
            "facilities": [{"name": f} for f in facilities],
            "distance_to_city_centre": {"value": distance, "unit": "km"},
            "products": [{
                "id": f"prod_{1000000 + i}",
                "price": {"total": f"{nightly * nights:.2f}", "currency": settings.CURRENCY},
                "room_name": "Deluxe King Room" if premium else "Standard Room",
                "meal_plan": "Breakfast included" if premium else None,
                "cancellation": {"type": "free_cancellation" if premium else "non_refundable"},
            }],
        })
    return hotels

async def search_hotels(city: str, lat: float, lon: float, check_in: date, check_out: date, guests: int = 2, rooms: int = 1, star_ratings: Iterable[int] = (3,), min_review_score: int = 80) -> tuple[list[dict], str | None]:
    """
    Hotel search. Tries Booking.com, then Duffel Stays, then SerpApi Google
    Hotels, then sample data. Returns (raw hotels tagged with `_source`, warning).
    """
    star_ratings = sorted(star_ratings)
    logger.info(f"Searching hotels: {city} {check_in}/{check_out} stars={star_ratings}")
    errors = []

    # 1. Booking.com Demand API
    if settings.BOOKING_API_KEY:
        try:
            hotels = await search_booking(lat, lon, check_in, check_out, guests, rooms, star_ratings, min_review_score)
            logger.info(f"Booking.com found {len(hotels)} properties")
            return hotels, None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Booking.com search error: {e}")
            errors.append(f"Booking.com: {e}")

    # 2. Duffel Stays
    if settings.DUFFEL_API_TOKEN:
        try:
            hotels = await search_duffel_stays(lat, lon, check_in, check_out, guests, rooms)
            logger.info(f"Duffel Stays found {len(hotels)} properties")
            return hotels, None
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Duffel Stays search error: {e}")
            errors.append(f"Duffel Stays: {e}")

    # 3. SerpApi (Google Hotels)
    if settings.SERPAPI_KEY:
        try:
            hotels = await asyncio.to_thread(search_serpapi_hotels, city, check_in, check_out, guests, star_ratings, min_review_score)
            logger.info(f"SerpApi found {len(hotels)} properties")
            return hotels, None
        except Exception as e:
            logger.error(f"SerpApi Error: {e}")
            errors.append(f"SerpApi: {e}")

    # 4. Sample data
    reason = "; ".join(errors) if errors else "no hotel provider configured"
    warning = f"Hotel prices are sample data ({reason})"
    logger.warning(warning)
    return mock_hotels(city, check_in, check_out, star_ratings), warning

async def _booking_order(hotel: HotelOffer, check_in: date, check_out: date, passenger: PassengerInfo) -> Optional[str]:
    """Preview then create a Booking.com order. None when either step is refused."""
    async with _booking_client() as client:
        preview = await client.post("/orders/preview", json={
            "booker": {"country": "us", "platform": "desktop"},
            "currency": settings.CURRENCY,
            "accommodation": {
                "id": int(hotel.id),
                "checkin": str(check_in),
                "checkout": str(check_out),
                "products": [{"id": hotel.product_id}],
            },
        })
        if preview.is_error:
            logger.warning(f"Booking.com preview refused ({preview.status_code}) for {hotel.id}")
            return None
        order_token = preview.json()["data"]["order_token"]

        order = await client.post("/orders/create", json={
            "order_token": order_token,
            "booker": {
                "email": passenger.email,
                "name": {"first_name": passenger.first_name, "last_name": passenger.last_name},
                "telephone": passenger.phone,
                "country": "us",
                "language": "en-gb",
            },
            "accommodation": {
                "products": [{
                    "id": hotel.product_id,
                    "guests": [{"name": f"{passenger.first_name} {passenger.last_name}", "email": passenger.email}],
                }],
            },
            "payment": {"timing": "pay_at_the_property"},
        })
        if order.is_error:
            logger.warning(f"Booking.com order refused ({order.status_code}) for {hotel.id}")
            return None
        return str(order.json()["data"]["id"])

async def create_hotel_order(hotel: HotelOffer, city: str, check_in: date, check_out: date, passenger: PassengerInfo, guests: int = 2) -> tuple[str | None, str | None]:
    """
    Returns (order id, checkout url). Only Booking.com properties can be
    ordered directly; everything else, and any refused order, gets an
    affiliate deep link instead.
    """
    deep_link = build_deep_link(hotel.name, city, check_in, check_out, guests)

    if not settings.BOOKING_API_KEY or hotel.source != "booking" or not hotel.product_id:
        return None, deep_link

    try:
        order_id = await _booking_order(hotel, check_in, check_out, passenger)
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.error(f"Booking.com order error: {e}")
        order_id = None

    if order_id is None:
        return None, deep_link
    logger.info(f"Booking.com order {order_id} created for {hotel.name}")
    return order_id, None
