"""
Booking lifecycle: confirm on create, cancel only inside the refund window.
"""
import asyncio
from datetime import datetime, timedelta, timezone

from takemeto75.core.ledger import BookingLedger
from takemeto75.core.packages import assemble
from takemeto75.models import BookingStatus, PassengerInfo, Tier
from takemeto75.skills import book_trip
from takemeto75.skills.book_trip import (
    BookingFailed,
    BookingNotFound,
    CancellationFailed,
    InvalidBookingTransition,
    RefundWindowExpired,
    cancel_booking,
    create_booking,
    get_booking,
)
from takemeto75.skills.search_offers import FlightOrderError

from factories import make_dates, make_destination, make_flight, make_hotel
from support import OfflineTestCase

CREATED = datetime(2026, 1, 8, 12, 0, tzinfo=timezone.utc)
PASSENGER = PassengerInfo(first_name="Ada", last_name="Lovelace", email="ada@example.com", date_of_birth="1990-12-10")

def _package():
    return assemble(
        make_destination(), make_dates(), Tier.BASE,
        make_flight("off_mock_0_JFKSJU_20260109", 325, base_price=300), make_hotel("H", 450, product_id="prod_H"),
        "Cheapest pair.",
    )

class BookingTestCase(OfflineTestCase):
    def setUp(self):
        super().setUp()
        self.ledger = BookingLedger()

    def book(self, now=CREATED):
        return asyncio.run(create_booking(_package(), PASSENGER, now=now, ledger=self.ledger))

    def cancel(self, booking_id, now=CREATED):
        return asyncio.run(cancel_booking(booking_id, now=now, ledger=self.ledger))

    def fetch(self, booking_id):
        return asyncio.run(get_booking(booking_id, ledger=self.ledger))

class CreateBookingTests(BookingTestCase):
    def test_confirmed_with_refund_window(self):
        booking = self.book()

        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertTrue(booking.id.startswith("bkg_"))
        self.assertEqual(booking.refund_deadline, CREATED + timedelta(minutes=60))
        self.assertTrue(booking.flight_order_id.startswith("MOCK-"))
        self.assertIsNone(booking.hotel_order_id)
        self.assertTrue(booking.hotel_checkout_url.startswith("https://www.awin1.com/cread.php?"))
        self.assertTrue(booking.refund_available(CREATED + timedelta(minutes=59)))
        self.assertEqual(self.fetch(booking.id), booking)

    def test_flight_order_is_paid_at_provider_price(self):
        amounts = []

        async def record(offer_id, passenger, amount, currency):
            amounts.append(amount)
            return "ord_123"

        self.patch(book_trip, "create_flight_order", record)
        booking = self.book()

        self.assertEqual(amounts, [300])
        self.assertEqual(booking.flight_order_id, "ord_123")

    def test_failed_flight_order_stores_nothing(self):
        async def refuse(*args):
            raise FlightOrderError("offer expired")

        self.patch(book_trip, "create_flight_order", refuse)

        with self.assertRaises(BookingFailed):
            self.book()
        self.assertEqual(len(self.ledger), 0)

class CancelBookingTests(BookingTestCase):
    def test_cancel_within_window(self):
        booking = self.book()
        now = CREATED + timedelta(minutes=30)

        cancelled = self.cancel(booking.id, now)

        self.assertEqual(cancelled.status, BookingStatus.CANCELLED)
        self.assertEqual(cancelled.cancelled_at, now)
        self.assertFalse(cancelled.refund_available(now))
        self.assertEqual(self.fetch(booking.id).status, BookingStatus.CANCELLED)

    def test_one_second_late_is_rejected(self):
        booking = self.book()

        with self.assertRaises(RefundWindowExpired) as ctx:
            self.cancel(booking.id, booking.refund_deadline + timedelta(seconds=1))

        self.assertEqual(ctx.exception.refund_deadline, booking.refund_deadline)
        self.assertEqual(self.fetch(booking.id).status, BookingStatus.CONFIRMED)

    def test_exactly_at_deadline_is_rejected(self):
        booking = self.book()
        with self.assertRaises(RefundWindowExpired):
            self.cancel(booking.id, booking.refund_deadline)

    def test_cancel_twice_is_invalid(self):
        booking = self.book()
        self.cancel(booking.id)

        with self.assertRaises(InvalidBookingTransition):
            self.cancel(booking.id)

    def test_unknown_booking(self):
        with self.assertRaises(BookingNotFound):
            self.cancel("bkg_nope")
        with self.assertRaises(BookingNotFound):
            self.fetch("bkg_nope")

    def test_upstream_failure_keeps_booking_confirmed(self):
        async def refuse(order_id):
            return False

        self.patch(book_trip, "cancel_flight_order", refuse)
        booking = self.book()

        with self.assertRaises(CancellationFailed):
            self.cancel(booking.id)
        self.assertEqual(self.fetch(booking.id).status, BookingStatus.CONFIRMED)

    def test_concurrent_cancels_only_one_wins(self):
        calls = []

        async def slow_cancel(order_id):
            calls.append(order_id)
            await asyncio.sleep(0.01)
            return True

        self.patch(book_trip, "cancel_flight_order", slow_cancel)
        booking = self.book()

        async def race():
            return await asyncio.gather(
                cancel_booking(booking.id, now=CREATED, ledger=self.ledger),
                cancel_booking(booking.id, now=CREATED, ledger=self.ledger),
                return_exceptions=True,
            )

        results = asyncio.run(race())

        self.assertEqual(len(calls), 1)
        self.assertEqual(sum(1 for r in results if isinstance(r, InvalidBookingTransition)), 1)
        self.assertEqual(sum(1 for r in results if not isinstance(r, Exception)), 1)

class LedgerLockTests(BookingTestCase):
    def test_lookups_of_unknown_ids_leave_no_locks(self):
        for i in range(200):
            with self.assertRaises(BookingNotFound):
                self.fetch(f"bkg_{i}")
            with self.assertRaises(BookingNotFound):
                self.cancel(f"bkg_{i}")

        self.assertEqual(len(self.ledger), 0)
        self.assertEqual(self.ledger.lock_count(), 0)

    def test_locks_released_after_booking_and_cancel(self):
        booking = self.book()
        self.cancel(booking.id)

        self.assertEqual(len(self.ledger), 1)
        self.assertEqual(self.ledger.lock_count(), 0)

    def test_waiters_share_one_lock(self):
        async def contend():
            async with self.ledger.hold("bkg_x"):
                waiter = asyncio.ensure_future(self._hold_briefly("bkg_x"))
                await asyncio.sleep(0)
                self.assertEqual(self.ledger.lock_count(), 1)
            await waiter

        asyncio.run(contend())
        self.assertEqual(self.ledger.lock_count(), 0)

    async def _hold_briefly(self, booking_id):
        async with self.ledger.hold(booking_id):
            await asyncio.sleep(0)
