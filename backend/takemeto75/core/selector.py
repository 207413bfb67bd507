"""
Flight + hotel selection.

DeterministicSelector applies the per-tier ranking rules. AdvisorSelector asks
an LLM to pick from the same candidates and wraps a fallback selector that
answers whenever the advisor is absent, slow, or replies with something unusable.
"""
import asyncio
import json
import logging
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel

from takemeto75.config import settings
from takemeto75.core import ai
from takemeto75.core.ranking import select_deterministic
from takemeto75.core.tiers import get_policy
from takemeto75.models import Destination, FlightOffer, HotelOffer, Selection, Tier, TravelDates

logger = logging.getLogger(__name__)

class SelectionRequest(BaseModel):
    destination: Destination
    dates: TravelDates
    tier: Tier
    flights: List[FlightOffer]
    hotels: List[HotelOffer]

class AdvisorReplyError(ValueError):
    """The advisor reply could not be turned into a valid selection."""

class DeterministicSelector:
    async def select(self, request: SelectionRequest) -> Optional[Selection]:
        return select_deterministic(
            request.flights,
            request.hotels,
            request.tier,
            cost_index=request.destination.cost_index,
            city=request.destination.city,
        )

def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"

def build_selection_prompt(request: SelectionRequest) -> str:
    policy = get_policy(request.tier)
    tier_label = request.tier.value.upper()
    dest = request.destination
    dates = request.dates

    lines = [
        f"You are a travel advisor selecting the best flight and hotel combination for a {tier_label} tier trip.",
        "",
        f"DESTINATION: {dest.city}, {dest.country}",
        f"DATES: {dates.check_in_display} to {dates.check_out_display} ({dates.nights} nights)",
    ]
    if dest.weather:
        lines.append(f"WEATHER: {dest.weather.avg_temp:.0f}°F, {dest.weather.condition}")

    w = policy.weights
    lines += [
        "",
        f"TIER CRITERIA FOR {tier_label}:",
        policy.criteria,
        f"Weights: price {w.price:.0%}, convenience {w.convenience:.0%}, quality {w.quality:.0%}",
        "",
        "AVAILABLE FLIGHTS:",
    ]
    for i, f in enumerate(request.flights, start=1):
        lines += [
            f"[Flight {i}] ID: {f.id}",
            f"- Airline: {f.airline}",
            f"- Price: ${f.price:,.2f} {f.currency}",
            f"- Outbound: {f.outbound.departure.airport} -> {f.outbound.arrival.airport}, "
            f"{f.outbound.duration}, {f.outbound.stops} stops",
        ]
        if f.inbound:
            lines.append(
                f"- Return: {f.inbound.departure.airport} -> {f.inbound.arrival.airport}, "
                f"{f.inbound.duration}, {f.inbound.stops} stops"
            )
        lines += [
            f"- Class: {f.cabin_class}",
            f"- Baggage: {'Included' if f.baggage_included else 'Not included'}",
            f"- Refundable: {_yes_no(f.refundable)}",
            "",
        ]

    lines.append("AVAILABLE HOTELS:")
    for i, h in enumerate(request.hotels, start=1):
        lines += [
            f"[Hotel {i}] ID: {h.id}",
            f"- Name: {h.name}",
            f"- Stars: {h.star_rating}",
            f"- Review Score: {h.review_score:.0f}/100 ({h.review_count} reviews)",
            f"- Price: ${h.price:,.2f} {h.currency} total",
            f"- Room: {h.room_type}",
            f"- Location: {h.distance_from_center or 'n/a'}",
            f"- Free Cancellation: {_yes_no(h.free_cancellation)}",
            f"- Breakfast: {'Included' if h.breakfast_included else 'Not included'}",
            f"- Amenities: {', '.join(h.amenities[:5]) or 'n/a'}",
            "",
        ]

    lines += [
        f"Based on the {tier_label} tier criteria, select the BEST flight and hotel combination.",
        "",
        "Respond in this exact JSON format:",
        "{",
        '  "selected_flight_id": "<flight id>",',
        '  "selected_hotel_id": "<hotel id>",',
        '  "reasoning": "<2-3 sentences explaining why this is the best combination for this tier>"',
        "}",
    ]
    return "\n".join(lines)

def _balanced_spans(text: str):
    """Yield every top-level {...} substring, skipping braces inside JSON strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        end = None
        for pos in range(start, len(text)):
            ch = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
            elif ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    end = pos
                    break
        if end is None:
            # Unclosed brace, try the next one
            start = text.find("{", start + 1)
            continue
        yield text[start:end + 1]
        start = text.find("{", end + 1)

def extract_json_object(text: str) -> Optional[dict]:
    """Return the first balanced {...} in text that parses as a JSON object."""
    for span in _balanced_spans(text or ""):
        try:
            value = json.loads(span)
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict):
            return value
    return None

def _resolve(payload: dict, kind: str, candidates: list):
    ref = payload.get(f"selected_{kind}_id")
    if ref is not None and not isinstance(ref, (dict, list)):
        for candidate in candidates:
            if candidate.id == str(ref):
                return candidate

    index = payload.get(f"selected_{kind}_index")
    if isinstance(index, int) and not isinstance(index, bool) and 1 <= index <= len(candidates):
        return candidates[index - 1]

    raise AdvisorReplyError(f"{kind} reference {ref if ref is not None else index!r} not in candidate set")

def parse_selection(reply: str, flights: List[FlightOffer], hotels: List[HotelOffer]) -> Selection:
    payload = extract_json_object(reply)
    if payload is None:
        raise AdvisorReplyError("no JSON object in reply")

    flight = _resolve(payload, "flight", flights)
    hotel = _resolve(payload, "hotel", hotels)

    reasoning = payload.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        raise AdvisorReplyError("missing reasoning")

    return Selection(flight=flight, hotel=hotel, reasoning=reasoning.strip(), source="advisor")

class AdvisorSelector:
    def __init__(
        self,
        advisor: Optional[Callable[[str], Awaitable[str]]] = None,
        fallback=None,
        timeout: Optional[float] = None,
        has_credentials: Optional[Callable[[], bool]] = None,
    ):
        # advisor/has_credentials resolve lazily so reconfiguring core.ai takes effect
        self.advisor = advisor
        self.fallback = fallback or DeterministicSelector()
        self.timeout = timeout
        self.has_credentials = has_credentials

    async def select(self, request: SelectionRequest) -> Optional[Selection]:
        if not request.flights or not request.hotels:
            return None

        has_credentials = self.has_credentials or ai.has_credentials
        if not has_credentials():
            logger.info("No advisor credential configured, using deterministic selection")
            return await self.fallback.select(request)

        advisor = self.advisor or ai.complete
        timeout = self.timeout if self.timeout is not None else settings.ADVISOR_TIMEOUT_SECONDS
        prompt = build_selection_prompt(request)

        try:
            reply = await asyncio.wait_for(advisor(prompt), timeout=timeout)
            selection = parse_selection(reply, request.flights, request.hotels)
        except asyncio.TimeoutError:
            logger.warning(f"Advisor timed out after {timeout}s for {request.tier.value}, falling back")
            return await self.fallback.select(request)
        except AdvisorReplyError as e:
            logger.warning(f"Advisor reply rejected for {request.tier.value}: {e}, falling back")
            return await self.fallback.select(request)
        except Exception as e:
            logger.error(f"Advisor error for {request.tier.value}: {e}, falling back")
            return await self.fallback.select(request)

        logger.info(f"Advisor picked flight {selection.flight.id} + hotel {selection.hotel.id} ({request.tier.value})")
        return selection

default_selector = AdvisorSelector()

async def select_best(request: SelectionRequest, selector=None) -> Optional[Selection]:
    return await (selector or default_selector).select(request)
