import asyncio
import unittest
from unittest import mock

from takemeto75.config import settings
from takemeto75.core.batching import gather_in_batches

class GatherInBatchesTests(unittest.TestCase):
    def test_results_keep_input_order(self):
        async def job(i):
            # later jobs finish first
            await asyncio.sleep(0.01 * (5 - i))
            return i

        results = asyncio.run(gather_in_batches([lambda i=i: job(i) for i in range(5)], batch_size=2))
        self.assertEqual(results, [0, 1, 2, 3, 4])

    def test_in_flight_never_exceeds_batch_size(self):
        state = {"running": 0, "peak": 0}

        async def job():
            state["running"] += 1
            state["peak"] = max(state["peak"], state["running"])
            await asyncio.sleep(0.005)
            state["running"] -= 1

        asyncio.run(gather_in_batches([job for _ in range(7)], batch_size=3))
        self.assertEqual(state["peak"], 3)

    def test_exceptions_returned_in_place(self):
        async def ok():
            return "ok"

        async def boom():
            raise RuntimeError("boom")

        results = asyncio.run(gather_in_batches([ok, boom, ok], batch_size=2, return_exceptions=True))
        self.assertEqual(results[0], "ok")
        self.assertIsInstance(results[1], RuntimeError)
        self.assertEqual(results[2], "ok")

    def test_empty_input(self):
        self.assertEqual(asyncio.run(gather_in_batches([])), [])

    def test_rejects_bad_batch_size(self):
        for size in (0, -1):
            with self.subTest(batch_size=size):
                with self.assertRaises(ValueError):
                    asyncio.run(gather_in_batches([], batch_size=size))

    def test_default_batch_size_from_settings(self):
        state = {"running": 0, "peak": 0}

        async def job():
            state["running"] += 1
            state["peak"] = max(state["peak"], state["running"])
            await asyncio.sleep(0.005)
            state["running"] -= 1

        with mock.patch.object(settings, "FETCH_BATCH_SIZE", 2):
            asyncio.run(gather_in_batches([job for _ in range(5)]))
        self.assertEqual(state["peak"], 2)
