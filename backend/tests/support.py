"""
Shared base class for the test suite.
Every test runs with provider credentials blanked, whatever the local .env holds.
"""
import unittest
from unittest import mock

from takemeto75.config import settings
from takemeto75.core import ai
from takemeto75.core.cache import package_cache
from takemeto75.skills import book_trip, search_offers

CREDENTIALS = [
    "DUFFEL_API_TOKEN",
    "AMADEUS_CLIENT_ID",
    "AMADEUS_CLIENT_SECRET",
    "BOOKING_API_KEY",
    "SERPAPI_KEY",
    "WEATHER_API_KEY",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "ANTHROPIC_API_KEY",
]

class OfflineTestCase(unittest.TestCase):
    def setUp(self):
        super().setUp()
        patcher = mock.patch.multiple(settings, **{key: "" for key in CREDENTIALS})
        patcher.start()
        self.addCleanup(patcher.stop)

        self.patch(ai, "openai_client", None)
        self.patch(ai, "gemini_model", None)
        self.patch(ai, "anthropic_client", None)
        self.patch(search_offers, "amadeus", None)

        self.addCleanup(package_cache.clear)
        self.addCleanup(book_trip.booking_ledger.clear)

    def patch(self, target, attribute, new):
        patcher = mock.patch.object(target, attribute, new)
        patcher.start()
        self.addCleanup(patcher.stop)
