"""
Static tier policy table. Built once at import time from settings and never mutated.
"""
from dataclasses import dataclass
from takemeto75.config import settings
from takemeto75.models import Tier

# Substrings matched case-insensitively against hotel names
LUXURY_BRANDS = (
    "Four Seasons",
    "Ritz-Carlton",
    "St. Regis",
    "Aman",
    "Mandarin Oriental",
    "Park Hyatt",
    "Peninsula",
    "Rosewood",
    "Waldorf Astoria",
    "Bulgari",
)

MIN_REVIEW_SCORE = 80  # 0-100 scale, i.e. 8.0+

@dataclass(frozen=True)
class ScoringWeights:
    price: float
    convenience: float
    quality: float

@dataclass(frozen=True)
class TierPolicy:
    tier: Tier
    name: str
    description: str
    cabin_class: str
    hotel_stars: frozenset
    min_review_score: int
    markup_cents: int
    preferred_brands: tuple
    weights: ScoringWeights
    criteria: str

    @property
    def markup(self) -> float:
        """Markup in major currency units."""
        return self.markup_cents / 100

def _build_policies() -> dict:
    return {
        Tier.BASE: TierPolicy(
            tier=Tier.BASE,
            name="Base",
            description="3-star hotel, economy flight",
            cabin_class="economy",
            hotel_stars=frozenset({3}),
            min_review_score=MIN_REVIEW_SCORE,
            markup_cents=settings.MARKUP_BASE_CENTS,
            preferred_brands=(),
            weights=ScoringWeights(price=0.7, convenience=0.2, quality=0.1),
            criteria=(
                "- PRIMARY: Minimize total cost\n"
                "- Consider destination cost of living (cheaper destinations = better value)\n"
                "- Economy flights are fine, prefer direct when price is similar\n"
                "- 3-star hotels with 8.0+ reviews\n"
                "- Value-focused: best bang for buck"
            ),
        ),
        Tier.PREMIUM: TierPolicy(
            tier=Tier.PREMIUM,
            name="Premium",
            description="4-star hotel, premium economy flight",
            cabin_class="premium_economy",
            hotel_stars=frozenset({4}),
            min_review_score=MIN_REVIEW_SCORE,
            markup_cents=settings.MARKUP_PREMIUM_CENTS,
            preferred_brands=(),
            weights=ScoringWeights(price=0.4, convenience=0.3, quality=0.3),
            criteria=(
                "- PRIMARY: Balance comfort and cost\n"
                "- Premium economy flights if reasonably priced, otherwise best economy\n"
                "- Prefer direct flights or single stop\n"
                "- 4-star hotels with excellent reviews (8.5+)\n"
                "- Good amenities matter (free cancellation, breakfast, good location)\n"
                "- Look for the sweet spot: great quality without luxury pricing"
            ),
        ),
        Tier.LUXE: TierPolicy(
            tier=Tier.LUXE,
            name="Luxe",
            description="5-star hotel, business class flight",
            cabin_class="business",
            hotel_stars=frozenset({5}),
            min_review_score=MIN_REVIEW_SCORE,
            markup_cents=settings.MARKUP_LUXE_CENTS,
            preferred_brands=("Four Seasons", "Ritz-Carlton", "St. Regis", "Aman", "Mandarin Oriental"),
            weights=ScoringWeights(price=0.1, convenience=0.4, quality=0.5),
            criteria=(
                "- PRIMARY: Best possible experience\n"
                "- Business class flights strongly preferred\n"
                "- Direct flights, convenient departure times\n"
                "- 5-star hotels, prioritize top review scores (9.0+)\n"
                "- Prefer recognized luxury brands (Four Seasons, Ritz-Carlton, etc.)\n"
                "- Location and amenities are critical\n"
                "- Price is secondary to quality"
            ),
        ),
    }

TIER_POLICIES = _build_policies()

def get_policy(tier) -> TierPolicy:
    return TIER_POLICIES[Tier(tier)]

def is_luxury_brand(name: str, brands=LUXURY_BRANDS) -> bool:
    lowered = (name or "").lower()
    return any(brand.lower() in lowered for brand in brands)
