import unittest

from takemeto75.models import Tier
from takemeto75.skills.normalize_offers import (
    normalize_flight,
    normalize_flights,
    normalize_hotel,
    normalize_hotels,
    normalize_review_score,
    parse_duration,
)

def duffel_offer(id="off_123", total="412.30", slice_duration="PT9H"):
    return {
        "_source": "duffel",
        "id": id,
        "total_amount": total,
        "total_currency": "USD",
        "owner": {"name": "JetBlue Airways", "logo_symbol_url": "https://example.com/b6.svg"},
        "passengers": [
            {"cabin_class": "economy", "baggages": [{"type": "checked", "quantity": 1}]},
        ],
        "conditions": {"refund_before_departure": {"allowed": True}},
        "slices": [
            {
                "duration": slice_duration,
                "segments": [
                    {
                        "origin": {"iata_code": "JFK"},
                        "destination": {"iata_code": "MIA"},
                        "departing_at": "2026-01-09T08:00:00",
                        "arriving_at": "2026-01-09T11:10:00",
                        "marketing_carrier": {"name": "JetBlue Airways", "iata_code": "B6"},
                        "marketing_carrier_flight_number": "101",
                    },
                    {
                        "origin": {"iata_code": "MIA"},
                        "destination": {"iata_code": "SJU"},
                        "departing_at": "2026-01-09T12:30:00",
                        "arriving_at": "2026-01-09T15:45:00",
                        "marketing_carrier": {"name": "JetBlue Airways", "iata_code": "B6"},
                        "marketing_carrier_flight_number": "202",
                    },
                ],
            },
            {
                "duration": "PT4H",
                "segments": [
                    {
                        "origin": {"iata_code": "SJU"},
                        "destination": {"iata_code": "JFK"},
                        "departing_at": "2026-01-12T10:00:00",
                        "arriving_at": "2026-01-12T14:00:00",
                        "marketing_carrier": {"name": "JetBlue Airways", "iata_code": "B6"},
                        "marketing_carrier_flight_number": "303",
                    },
                ],
            },
        ],
    }

def amadeus_offer():
    return {
        "_source": "amadeus",
        "id": "1",
        "price": {"currency": "USD", "total": "380.00", "grandTotal": "380.00"},
        "validatingAirlineCodes": ["DL"],
        "_carriers": {"DL": "DELTA AIR LINES"},
        "itineraries": [
            {
                "duration": "PT3H50M",
                "segments": [
                    {
                        "departure": {"iataCode": "ATL", "at": "2026-01-09T07:15:00"},
                        "arrival": {"iataCode": "SJU", "at": "2026-01-09T11:05:00"},
                        "carrierCode": "DL",
                        "number": "411",
                    },
                ],
            },
        ],
        "travelerPricings": [
            {"fareDetailsBySegment": [{"cabin": "ECONOMY", "includedCheckedBags": {"quantity": 0}}]},
        ],
    }

def booking_hotel(products=True, review_score=8.6):
    raw = {
        "_source": "booking",
        "id": 4521,
        "name": "Ritz-Carlton San Juan",
        "class": 5,
        "review_score": review_score,
        "number_of_reviews": 2140,
        "address": "6961 Ave of the Governors",
        "distance_to_city_centre": {"value": 3.2, "unit": "km"},
        "photos": [{"url": "https://example.com/1.jpg"}],
        "facilities": [{"name": "Pool"}, {"name": "Spa"}],
    }
    if products:
        raw["products"] = [{
            "id": "prod_9",
            "room_name": "Deluxe King",
            "price": {"total": 1200.0, "currency": "USD"},
            "cancellation": {"type": "free_cancellation"},
            "meal_plan": "Breakfast included",
        }]
    return raw

class FlightNormalizerTests(unittest.TestCase):
    def test_duffel_duration_comes_from_timestamps(self):
        offer = normalize_flight(duffel_offer(), Tier.BASE)

        self.assertEqual(offer.outbound.duration_minutes, 465)
        self.assertEqual(offer.outbound.duration, "7h 45m")
        self.assertEqual(offer.outbound.stops, 1)
        self.assertEqual(offer.stops, 1)
        self.assertEqual(offer.outbound.departure.airport, "JFK")
        self.assertEqual(offer.outbound.arrival.airport, "SJU")
        self.assertEqual(offer.outbound.flight_number, "B6101")
        self.assertEqual(offer.inbound.stops, 0)

    def test_duffel_price_carries_tier_markup(self):
        base = normalize_flight(duffel_offer(), Tier.BASE)
        luxe = normalize_flight(duffel_offer(), Tier.LUXE)

        self.assertEqual(base.base_price, 412.30)
        self.assertEqual(base.price, 437.30)
        self.assertEqual(luxe.price, 487.30)
        self.assertTrue(base.baggage_included)
        self.assertTrue(base.refundable)
        self.assertEqual(base.source, "duffel")

    def test_amadeus_offer_uses_airline_names(self):
        offer = normalize_flight(amadeus_offer(), Tier.PREMIUM)

        self.assertEqual(offer.airline, "Delta Air Lines")
        self.assertEqual(offer.outbound.carrier, "Delta Air Lines")
        self.assertEqual(offer.outbound.duration_minutes, 230)
        self.assertEqual(offer.price, 420.0)
        self.assertIsNone(offer.inbound)
        self.assertFalse(offer.baggage_included)
        self.assertEqual(offer.cabin_class, "economy")

    def test_malformed_offers_are_dropped_individually(self):
        offers = [
            duffel_offer("off_nan", total="NaN"),
            duffel_offer("off_zero", total="0"),
            {"_source": "kayak", "id": "off_unknown"},
            {"_source": "duffel", "id": "off_broken"},
            None,
            "off_as_text",
            duffel_offer("off_good"),
        ]
        normalized = normalize_flights(offers, Tier.BASE)
        self.assertEqual([o.id for o in normalized], ["off_good"])

    def test_unknown_source_raises(self):
        with self.assertRaises(ValueError):
            normalize_flight({"_source": "kayak"}, Tier.BASE)

class HotelNormalizerTests(unittest.TestCase):
    def test_booking_hotel(self):
        hotel = normalize_hotel(booking_hotel(), nights=3)

        self.assertEqual(hotel.id, "4521")
        self.assertEqual(hotel.review_score, 86.0)
        self.assertEqual(hotel.price, 1200.0)
        self.assertEqual(hotel.nightly_rate, 400.0)
        self.assertEqual(hotel.product_id, "prod_9")
        self.assertTrue(hotel.free_cancellation)
        self.assertTrue(hotel.breakfast_included)
        self.assertTrue(hotel.is_luxury_brand)
        self.assertEqual(hotel.distance_from_center, "3.2 km from center")
        self.assertEqual(hotel.amenities, ["Pool", "Spa"])

    def test_booking_hotel_without_products_is_skipped(self):
        self.assertIsNone(normalize_hotel(booking_hotel(products=False)))
        hotels = normalize_hotels([booking_hotel(products=False), booking_hotel()], nights=3)
        self.assertEqual(len(hotels), 1)

    def test_low_booking_score_stays_on_ten_point_scale(self):
        # 0.9 out of 10 must not be read as 0.9 out of 100
        self.assertEqual(normalize_hotel(booking_hotel(review_score=0.9)).review_score, 9.0)

    def test_serpapi_five_point_scale_and_nightly_total(self):
        raw = {
            "_source": "serpapi",
            "name": "Hotel El Convento",
            "property_token": "ChkI123",
            "extracted_hotel_class": 4,
            "overall_rating": 4.5,
            "reviews": 812,
            "rate_per_night": {"extracted_lowest": 210},
            "amenities": ["Free breakfast", "Pool"],
        }
        hotel = normalize_hotel(raw, nights=3)

        self.assertEqual(hotel.review_score, 90.0)
        self.assertEqual(hotel.price, 630)
        self.assertTrue(hotel.breakfast_included)
        self.assertEqual(hotel.source, "serpapi")

    def test_duffel_stay_without_rate_is_skipped(self):
        raw = {"_source": "duffel_stays", "id": "srr_1", "accommodation": {"name": "Somewhere"}}
        self.assertIsNone(normalize_hotel(raw))

    def test_unknown_source_is_dropped(self):
        self.assertEqual(normalize_hotels([{"_source": "expedia", "id": 1}]), [])

    def test_non_dict_entries_are_dropped(self):
        self.assertEqual(normalize_hotels([None, ["booking"], 42]), [])

class ScaleTests(unittest.TestCase):
    def test_normalize_review_score(self):
        cases = [
            (8.6, 10, 86.0),
            (4.5, 5, 90.0),
            (9, None, 90.0),
            (85, None, 85.0),
            (None, 10, 0.0),
            ("bad", 10, 0.0),
            (12, 10, 100.0),
        ]
        for value, scale, expected in cases:
            with self.subTest(value=value, scale=scale):
                self.assertEqual(normalize_review_score(value, scale), expected)

    def test_parse_duration(self):
        cases = [
            ("PT4H30M", 270),
            ("P1DT2H", 1560),
            ("PT45M", 45),
            ("4h 30m", 270),
            ("2h", 120),
            ("", 0),
            ("soon", 0),
        ]
        for text, minutes in cases:
            with self.subTest(text=text):
                self.assertEqual(parse_duration(text), minutes)
