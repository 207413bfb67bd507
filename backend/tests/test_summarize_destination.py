import asyncio
import json
from datetime import date

from takemeto75.data.destinations import UnknownAirport, UnknownDestination
from takemeto75.skills import summarize_destination as summary_module
from takemeto75.skills.summarize_destination import (
    flight_multiplier,
    price_ranges,
    season_hook,
    summarize_destination,
)

from support import OfflineTestCase

MARCH = date(2026, 3, 15)

class PriceRangeTests(OfflineTestCase):
    def test_multiplier_by_country(self):
        cases = [("USA", 1.0), ("Mexico", 1.0), ("Puerto Rico", 1.2), ("Japan", 2.0), ("Spain", 1.5)]
        for country, expected in cases:
            with self.subTest(country=country):
                self.assertEqual(flight_multiplier(country), expected)

    def test_domestic_ranges(self):
        self.assertEqual(price_ranges("USA"), {
            "base": "$600-900",
            "premium": "$1,100-1,600",
            "luxe": "$2,500-3,800",
        })

    def test_ranges_scale_with_distance(self):
        self.assertEqual(price_ranges("Puerto Rico")["base"], "$700-1,000")
        self.assertEqual(price_ranges("Spain")["base"], "$900-1,300")
        self.assertEqual(price_ranges("Thailand")["base"], "$1,200-1,700")

    def test_season_hook(self):
        cases = [
            (date(2026, 1, 5), "Post-holiday"),
            (date(2026, 12, 20), "Post-holiday"),
            (date(2026, 7, 1), "Peak season"),
            (MARCH, "Shoulder season"),
        ]
        for today, prefix in cases:
            with self.subTest(today=today):
                self.assertTrue(season_hook(today).startswith(prefix))

class SummarizeDestinationTests(OfflineTestCase):
    def advise(self, reply=None, error=None):
        prompts = []

        async def complete(prompt):
            prompts.append(prompt)
            if error:
                raise error
            return reply

        self.patch(summary_module.ai, "complete", complete)
        self.patch(summary_module.ai, "has_credentials", lambda: True)
        return prompts

    def test_template_without_credentials(self):
        result = asyncio.run(summarize_destination("san juan", "JFK", today=MARCH))

        self.assertEqual(result["source"], "template")
        self.assertEqual(result["destination"], "San Juan")
        self.assertTrue(result["summary"].startswith("San Juan offers old San Juan's colorful streets"))
        self.assertNotIn("..", result["summary"])
        self.assertTrue(result["summary"].endswith("Shoulder season pricing in effect."))
        self.assertEqual(result["prices"], price_ranges("Puerto Rico"))

    def test_advisor_summary(self):
        reply = "Here you go:\n" + json.dumps({"summary": "Sun, rum and cobblestones. Shoulder season pricing."})
        prompts = self.advise(reply)

        result = asyncio.run(summarize_destination("Cancun", "LAX", today=MARCH))

        self.assertEqual(result["source"], "advisor")
        self.assertEqual(result["summary"], "Sun, rum and cobblestones. Shoulder season pricing.")
        self.assertEqual(result["prices"], price_ranges("Mexico"))
        self.assertIn("Cancun, Mexico", prompts[0])
        self.assertIn("flying from LAX", prompts[0])
        self.assertIn("March", prompts[0])

    def test_unusable_reply_falls_back_to_template(self):
        for reply in ("no json here", '{"summary": ""}', '{"headline": "x"}'):
            with self.subTest(reply=reply):
                self.advise(reply)
                result = asyncio.run(summarize_destination("Cancun", "LAX", today=MARCH))
                self.assertEqual(result["source"], "template")
                self.assertTrue(result["summary"].startswith("Cancun offers"))

    def test_advisor_error_falls_back_to_template(self):
        self.advise(error=RuntimeError("rate limited"))
        result = asyncio.run(summarize_destination("Cancun", today=MARCH))
        self.assertEqual(result["source"], "template")

    def test_unknown_inputs(self):
        with self.assertRaises(UnknownAirport):
            asyncio.run(summarize_destination("Cancun", "XXX"))
        with self.assertRaises(UnknownDestination):
            asyncio.run(summarize_destination("Atlantis", "JFK"))
