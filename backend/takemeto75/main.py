from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from takemeto75.config import settings
from takemeto75.core.cache import package_cache
from takemeto75.data.destinations import UnknownAirport, UnknownDestination
from takemeto75.models import PassengerInfo, Tier
from takemeto75.skills.book_trip import (
    BookingFailed,
    BookingNotFound,
    CancellationFailed,
    InvalidBookingTransition,
    RefundWindowExpired,
    cancel_booking,
    create_booking,
    get_booking,
    utcnow,
)
from takemeto75.skills.build_packages import build_packages
from takemeto75.skills.find_destinations import find_destinations
from takemeto75.skills.summarize_destination import summarize_destination
from pydantic import BaseModel, Field
from typing import List, Optional
import logging
import time

# Setup Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="TakeMeTo75", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000", "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/destinations")
async def list_destinations(
    lat: Optional[float] = None,
    lon: Optional[float] = None,
    airport: Optional[str] = None,
    limit: int = Query(3, ge=1, le=20),
):
    start_time = time.time()
    if not airport and (lat is None or lon is None):
        raise HTTPException(status_code=400, detail="Provide airport or lat/lon")

    try:
        result = await find_destinations(lat=lat, lon=lon, airport_code=airport, limit=limit)
    except UnknownAirport as e:
        raise HTTPException(status_code=400, detail=str(e))

    result["latency_seconds"] = round(time.time() - start_time, 3)
    return result

class PackageRequest(BaseModel):
    origin_airport: str
    destination_city: str
    tiers: Optional[List[Tier]] = None
    nights: int = Field(settings.TRIP_NIGHTS, ge=1, le=14)

@app.post("/packages")
async def request_packages(request: PackageRequest):
    start_time = time.time()
    logger.info(f"Package request: {request.origin_airport}->{request.destination_city} tiers={request.tiers} nights={request.nights}")

    try:
        result = await build_packages(
            request.origin_airport, request.destination_city, request.tiers, nights=request.nights,
        )
    except UnknownAirport as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownDestination as e:
        raise HTTPException(status_code=404, detail=str(e))

    result["latency_seconds"] = round(time.time() - start_time, 3)
    return result

class SummaryRequest(BaseModel):
    destination_city: str
    origin_airport: str = "SFO"

@app.post("/summary")
async def summarize(request: SummaryRequest):
    try:
        return await summarize_destination(request.destination_city, request.origin_airport)
    except UnknownAirport as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UnknownDestination as e:
        raise HTTPException(status_code=404, detail=str(e))

class BookingRequest(BaseModel):
    package_id: str
    passenger: PassengerInfo

def _booking_view(booking) -> dict:
    return {
        **booking.model_dump(mode="json"),
        "refund_available": booking.refund_available(utcnow()),
    }

@app.post("/bookings")
async def book_package(request: BookingRequest):
    package = package_cache.get(request.package_id)
    if package is None:
        raise HTTPException(status_code=404, detail=f"Package not found or expired: {request.package_id}")

    try:
        booking = await create_booking(package, request.passenger)
    except BookingFailed as e:
        logger.error(f"Booking Failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return _booking_view(booking)

@app.get("/bookings/{booking_id}")
async def read_booking(booking_id: str):
    try:
        booking = await get_booking(booking_id)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _booking_view(booking)

@app.delete("/bookings/{booking_id}")
async def cancel(booking_id: str):
    try:
        booking = await cancel_booking(booking_id)
    except BookingNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidBookingTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except RefundWindowExpired as e:
        raise HTTPException(status_code=410, detail={
            "error": "Refund window expired",
            "refund_deadline": e.refund_deadline.isoformat(),
        })
    except CancellationFailed as e:
        logger.error(f"Cancellation Failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return _booking_view(booking)

@app.get("/health")
def health_check():
    return {"status": "ok", "env": settings.ENV}
