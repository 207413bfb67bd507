import unittest

from takemeto75.core.cache import PackageCache
from takemeto75.core.packages import assemble
from takemeto75.models import Tier

from factories import make_dates, make_destination, make_flight, make_hotel

class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

def _package():
    return assemble(make_destination(), make_dates(), Tier.BASE, make_flight("F", 200), make_hotel("H", 300), "r")

class PackageCacheTests(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()

    def test_get_returns_package_until_expiry(self):
        cache = PackageCache(ttl_seconds=60, clock=self.clock)
        package = _package()
        cache.put(package)

        self.clock.now += 59
        self.assertEqual(cache.get(package.id), package)

        self.clock.now += 1
        self.assertIsNone(cache.get(package.id))

    def test_unknown_id(self):
        self.assertIsNone(PackageCache(ttl_seconds=60).get("pkg_missing"))

    def test_put_purges_expired_entries(self):
        cache = PackageCache(ttl_seconds=10, clock=self.clock)
        old = _package()
        cache.put(old)

        self.clock.now += 11
        cache.put(_package())

        self.assertNotIn(old.id, cache._store)
