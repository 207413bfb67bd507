"""
Booking lifecycle: create (lands in confirmed), cancel within the refund
window, read. Bookings live in the process-local ledger.
"""
from takemeto75.config import settings
from takemeto75.core.ledger import BookingLedger
from takemeto75.core.packages import generate_id
from takemeto75.models import Booking, BookingStatus, PassengerInfo, TripPackage
from takemeto75.skills.search_hotels import create_hotel_order
from takemeto75.skills.search_offers import FlightOrderError, cancel_flight_order, create_flight_order
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

class BookingError(Exception):
    pass

class BookingNotFound(BookingError):
    def __init__(self, booking_id: str):
        super().__init__(f"Booking not found: {booking_id}")
        self.booking_id = booking_id

class InvalidBookingTransition(BookingError):
    pass

class RefundWindowExpired(BookingError):
    def __init__(self, booking_id: str, refund_deadline: datetime):
        super().__init__(f"Refund window for {booking_id} closed at {refund_deadline.isoformat()}")
        self.booking_id = booking_id
        self.refund_deadline = refund_deadline

class BookingFailed(BookingError):
    pass

class CancellationFailed(BookingError):
    pass

booking_ledger = BookingLedger()

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

async def create_booking(
    package: TripPackage,
    passenger: PassengerInfo,
    now: Optional[datetime] = None,
    ledger: Optional[BookingLedger] = None,
) -> Booking:
    """
    Order the flight, then the hotel (deep link when it can't be ordered),
    and store the booking as confirmed. A failed flight order stores nothing.
    """
    ledger = booking_ledger if ledger is None else ledger
    created_at = now or utcnow()

    flight = package.flight
    try:
        flight_order_id = await create_flight_order(
            flight.id, passenger, flight.base_price or flight.price, flight.currency,
        )
    except FlightOrderError as e:
        raise BookingFailed(str(e)) from e

    hotel_order_id, checkout_url = await create_hotel_order(
        package.hotel, package.destination.city, package.dates.check_in, package.dates.check_out, passenger,
    )

    booking = Booking(
        id=generate_id("bkg"),
        package=package,
        passenger=passenger,
        flight_order_id=flight_order_id,
        hotel_order_id=hotel_order_id,
        hotel_checkout_url=checkout_url,
        status=BookingStatus.CONFIRMED,
        created_at=created_at,
        refund_deadline=created_at + timedelta(minutes=settings.REFUND_WINDOW_MINUTES),
    )
    await ledger.add(booking)
    logger.info(f"Booking {booking.id} confirmed for package {package.id}, refundable until {booking.refund_deadline.isoformat()}")
    return booking

async def get_booking(booking_id: str, ledger: Optional[BookingLedger] = None) -> Booking:
    ledger = booking_ledger if ledger is None else ledger
    booking = await ledger.get(booking_id)
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking

async def cancel_booking(
    booking_id: str,
    now: Optional[datetime] = None,
    ledger: Optional[BookingLedger] = None,
) -> Booking:
    """
    Cancel while now < refund deadline. The deadline check, the upstream
    flight cancellation and the status change happen under the booking's lock.
    Hotel orders are left as they are.
    """
    ledger = booking_ledger if ledger is None else ledger
    now = now or utcnow()

    async with ledger.hold(booking_id):
        booking = ledger.peek(booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        if booking.status != BookingStatus.CONFIRMED:
            raise InvalidBookingTransition(f"Booking {booking_id} is {booking.status.value}")
        if now >= booking.refund_deadline:
            logger.info(f"Refund window expired for {booking_id}")
            raise RefundWindowExpired(booking_id, booking.refund_deadline)

        if booking.flight_order_id and not await cancel_flight_order(booking.flight_order_id):
            raise CancellationFailed(f"Failed to cancel flight order {booking.flight_order_id}")

        cancelled = booking.model_copy(update={"status": BookingStatus.CANCELLED, "cancelled_at": now})
        ledger.store(cancelled)

    logger.info(f"Booking {booking_id} cancelled")
    return cancelled
