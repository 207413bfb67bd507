from amadeus import Client, ResponseError
from takemeto75.config import settings
from takemeto75.models import PassengerInfo
from datetime import date, datetime, timedelta
import asyncio
import httpx
import logging
import random
import secrets

logger = logging.getLogger(__name__)

DUFFEL_BASE_URL = "https://api.duffel.com"
DUFFEL_VERSION = "v2"
MOCK_ORDER_PREFIX = "MOCK-"

class FlightOrderError(Exception):
    pass

# Initialize Amadeus Client
amadeus = None
if settings.AMADEUS_CLIENT_ID and settings.AMADEUS_CLIENT_SECRET:
    try:
        amadeus = Client(
            client_id=settings.AMADEUS_CLIENT_ID,
            client_secret=settings.AMADEUS_CLIENT_SECRET,
            hostname=settings.AMADEUS_HOSTNAME
        )
    except Exception as e:
        logger.error(f"Failed to initialize Amadeus client: {e}")
        amadeus = None

def _duffel_headers() -> dict:
    return {
        "Authorization": f"Bearer {settings.DUFFEL_API_TOKEN}",
        "Duffel-Version": DUFFEL_VERSION,
        "Content-Type": "application/json",
        "Accept": "application/json",
    }

def _duffel_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=DUFFEL_BASE_URL,
        headers=_duffel_headers(),
        timeout=settings.HTTP_TIMEOUT_SECONDS,
    )

async def search_duffel(origin: str, dest: str, departure_date: date, return_date: date, passengers: int, cabin_class: str) -> list[dict]:
    payload = {
        "data": {
            "slices": [
                {"origin": origin, "destination": dest, "departure_date": str(departure_date)},
                {"origin": dest, "destination": origin, "departure_date": str(return_date)},
            ],
            "passengers": [{"type": "adult"} for _ in range(passengers)],
            "cabin_class": cabin_class,
        }
    }
    async with _duffel_client() as client:
        resp = await client.post("/air/offer_requests", params={"return_offers": "true"}, json=payload)
        resp.raise_for_status()
        offers = resp.json()["data"].get("offers") or []

    for offer in offers:
        offer["_source"] = "duffel"
    return offers

def search_amadeus(origin: str, dest: str, departure_date: date, return_date: date, passengers: int, cabin_class: str) -> list[dict]:
    """Blocking SDK call, run it in a worker thread."""
    response = amadeus.shopping.flight_offers_search.get(
        originLocationCode=origin,
        destinationLocationCode=dest,
        departureDate=str(departure_date),
        returnDate=str(return_date),
        adults=passengers,
        travelClass=cabin_class.upper(),
        currencyCode=settings.CURRENCY,
        max=20
    )
    carriers = ((response.result or {}).get("dictionaries") or {}).get("carriers") or {}
    offers = response.data or []
    for offer in offers:
        offer["_source"] = "amadeus"
        offer["_carriers"] = carriers
    return offers

MOCK_AIRLINES = [
    ("United Airlines", "UA", "ORD"),
    ("American Airlines", "AA", "DFW"),
    ("Delta Air Lines", "DL", "ATL"),
    ("JetBlue Airways", "B6", "BOS"),
]

MOCK_BASE_PRICES = {
    "economy": 250,
    "premium_economy": 450,
    "business": 1200,
    "first": 2500,
}

def _mock_segment(origin: str, dest: str, departing: datetime, minutes: int, airline: tuple, number: int) -> dict:
    name, code, _ = airline
    return {
        "origin": {"iata_code": origin},
        "destination": {"iata_code": dest},
        "departing_at": departing.isoformat(),
        "arriving_at": (departing + timedelta(minutes=minutes)).isoformat(),
        "duration": f"PT{minutes // 60}H{minutes % 60}M",
        "operating_carrier": {"name": name, "iata_code": code},
        "operating_carrier_flight_number": str(number),
    }

def _mock_slice(origin: str, dest: str, day: date, hour: int, airline: tuple, number: int, connect: bool) -> dict:
    departing = datetime(day.year, day.month, day.day, hour)
    if not connect:
        return {"segments": [_mock_segment(origin, dest, departing, 270, airline, number)]}

    hub = airline[2] if airline[2] not in (origin, dest) else "CLT"
    first = _mock_segment(origin, hub, departing, 150, airline, number)
    second = _mock_segment(hub, dest, departing + timedelta(minutes=150 + 75), 165, airline, number + 1000)
    return {"segments": [first, second]}

def mock_flight_offers(origin: str, dest: str, departure_date: date, return_date: date, passengers: int = 1, cabin_class: str = "economy") -> list[dict]:
    """
    Duffel-shaped sample offers. Seeded by the search so repeated requests
    return the same offers.
    """
    rng = random.Random(f"{origin}-{dest}-{departure_date}-{return_date}-{cabin_class}")
    base = MOCK_BASE_PRICES.get(cabin_class, MOCK_BASE_PRICES["economy"])
    offers = []

    for i, airline in enumerate(MOCK_AIRLINES[:3]):
        # Third carrier connects through its hub and prices lower
        connect = i == 2
        price = (base + rng.random() * 200) * (0.85 if connect else 1.0) * passengers
        hour = 6 + rng.randrange(12)

        offers.append({
            "_source": "duffel",
            "id": f"off_mock_{i}_{origin}{dest}_{departure_date:%Y%m%d}",
            "total_amount": f"{price:.2f}",
            "total_currency": settings.CURRENCY,
            "owner": {"name": airline[0], "iata_code": airline[1]},
            "slices": [
                _mock_slice(origin, dest, departure_date, hour, airline, 100 + i * 50, connect),
                _mock_slice(dest, origin, return_date, min(hour + 2, 20), airline, 101 + i * 50, connect),
            ],
            "passengers": [
                {
                    "id": f"pas_mock_{n}",
                    "cabin_class": cabin_class,
                    "baggages": [{"type": "checked", "quantity": 1}] if cabin_class != "economy" else [],
                }
                for n in range(passengers)
            ],
            "conditions": {
                "refund_before_departure": {"allowed": cabin_class != "economy"},
            },
        })
    return offers

async def search_flights(origin: str, dest: str, departure_date: date, return_date: date, passengers: int = 1, cabin_class: str = "economy") -> tuple[list[dict], str | None]:
    """
    Round-trip flight search. Tries Duffel, then Amadeus, then sample data.
    Returns (raw offers tagged with `_source`, warning when sample data was used).
    An empty list from a live provider is a valid answer, not a failure.
    """
    logger.info(f"Searching flights: {origin}->{dest} {departure_date}/{return_date} ({cabin_class})")
    errors = []

    # 1. Duffel
    if settings.DUFFEL_API_TOKEN:
        try:
            offers = await search_duffel(origin, dest, departure_date, return_date, passengers, cabin_class)
            logger.info(f"Duffel found {len(offers)} offers")
            return offers, None
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error(f"Duffel search error: {e}")
            errors.append(f"Duffel: {e}")

    # 2. Amadeus
    if amadeus:
        try:
            offers = await asyncio.to_thread(search_amadeus, origin, dest, departure_date, return_date, passengers, cabin_class)
            logger.info(f"Amadeus found {len(offers)} offers")
            return offers, None
        except ResponseError as e:
            logger.error(f"Amadeus API Error: {e.code}")
            errors.append(f"Amadeus: {e.code}")

    # 3. Sample data
    reason = "; ".join(errors) if errors else "no flight provider configured"
    warning = f"Flight prices are sample data ({reason})"
    logger.warning(warning)
    return mock_flight_offers(origin, dest, departure_date, return_date, passengers, cabin_class), warning

def _duffel_passenger(passenger_id: str, passenger: PassengerInfo) -> dict:
    return {
        "id": passenger_id,
        "born_on": passenger.date_of_birth,
        "email": passenger.email,
        "family_name": passenger.last_name,
        "given_name": passenger.first_name,
        "gender": "m" if passenger.gender == "male" else "f",
        "phone_number": passenger.phone,
        "title": "mr" if passenger.gender == "male" else "ms",
    }

async def create_flight_order(offer_id: str, passenger: PassengerInfo, amount: float, currency: str) -> str:
    """
    Book the offer and return the order id. Without a Duffel token, or for
    sample offers, a MOCK- reference is returned instead.
    """
    if not settings.DUFFEL_API_TOKEN or offer_id.startswith("off_mock_"):
        ref = MOCK_ORDER_PREFIX + secrets.token_hex(3).upper()
        logger.info(f"Mock flight order {ref} for {offer_id}")
        return ref

    try:
        async with _duffel_client() as client:
            # Passenger ids are assigned by the offer
            offer_resp = await client.get(f"/air/offers/{offer_id}")
            offer_resp.raise_for_status()
            passenger_id = offer_resp.json()["data"]["passengers"][0]["id"]

            resp = await client.post("/air/orders", json={
                "data": {
                    "type": "instant",
                    "selected_offers": [offer_id],
                    "passengers": [_duffel_passenger(passenger_id, passenger)],
                    "payments": [{"type": "balance", "amount": f"{amount:.2f}", "currency": currency}],
                }
            })
            resp.raise_for_status()
            order = resp.json()["data"]
    except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
        logger.error(f"Duffel order error: {e}")
        raise FlightOrderError(f"Failed to create flight booking: {e}") from e

    logger.info(f"Duffel order {order['id']} ({order.get('booking_reference')}) created")
    return order["id"]

async def cancel_flight_order(order_id: str) -> bool:
    """Quote then confirm a Duffel order cancellation. True on success."""
    if not settings.DUFFEL_API_TOKEN or order_id.startswith(MOCK_ORDER_PREFIX):
        return True

    try:
        async with _duffel_client() as client:
            quote = await client.post("/air/order_cancellations", json={"data": {"order_id": order_id}})
            quote.raise_for_status()
            cancellation_id = quote.json()["data"]["id"]

            confirm = await client.post(f"/air/order_cancellations/{cancellation_id}/actions/confirm")
            confirm.raise_for_status()
    except (httpx.HTTPError, KeyError, ValueError) as e:
        logger.error(f"Cancel order error for {order_id}: {e}")
        return False

    logger.info(f"Duffel order {order_id} cancelled ({cancellation_id})")
    return True
