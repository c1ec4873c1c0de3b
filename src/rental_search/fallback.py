"""Stand-in listings used when the model cannot supply real ones."""

import logging
import random
import re
from datetime import date, timedelta

from rental_search.data.market import LocationMarketData, get_market_data
from rental_search.models import Apartment, Contact, UserRequirements

logger = logging.getLogger(__name__)

_LISTING_PLATFORMS = (
    "https://www.apartments.com",
    "https://www.zillow.com",
    "https://www.rent.com",
    "https://www.trulia.com",
)
_PRICE_JITTER = 1000


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]", "", text.lower())


class FallbackSynthesizer:
    """Deterministic-per-seed generator of plausible listings.

    Prices, ratings, areas and flags are drawn from ``rng``; pass a seeded
    ``random.Random`` for reproducible output. Any requirement supplied by the
    caller (rooms, flags, area and budget) is honoured.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()

    def synthesize(
        self,
        location: str,
        count: int,
        requirements: UserRequirements | None = None,
    ) -> list[Apartment]:
        _, market = get_market_data(location)
        batch = f"{self._rng.getrandbits(32):08x}"
        logger.info("Synthesizing %d fallback listings for %s", count, location)
        if requirements is None:
            return [self._generic(location, market, batch, i) for i in range(count)]
        return [self._personalized(requirements, market, batch, i) for i in range(count)]

    def _generic(self, location: str, market: LocationMarketData, batch: str, i: int) -> Apartment:
        rng = self._rng
        neighborhood = market.neighborhoods[i % len(market.neighborhoods)]
        title = f"{neighborhood} Apartment {i + 1}"
        price = round(market.average_rent + (rng.random() - 0.5) * _PRICE_JITTER)
        price = min(max(price, market.price_range.min), market.price_range.max)
        bedrooms = rng.randint(1, 3)
        bathrooms = rng.randint(1, 2)
        amenities = list(market.common_amenities[:5])
        audience = "families" if bedrooms >= 2 else "young professionals"

        return Apartment(
            id=f"fallback-{batch}-{i + 1}",
            title=title,
            location=f"{neighborhood}, {location}",
            price=max(price, 1),
            bedrooms=bedrooms,
            bathrooms=bathrooms,
            area=800 + rng.randrange(800),
            description=(
                f"{bedrooms}-bedroom apartment in {neighborhood} with {', '.join(amenities[:3])}. "
                f"Close to transit, suited to {audience}."
            ),
            amenities=amenities,
            rating=round(3.8 + rng.random() * 1.2, 1),
            distance=round(0.5 + rng.random() * 3, 1),
            commute_time=15 + rng.randrange(45),
            pet_friendly=rng.random() > 0.3,
            furnished=rng.random() > 0.6,
            parking=rng.random() > 0.4,
            contact=Contact(phone=f"(555) 555-{1000 + i:04d}", email=f"contact@{_slug(neighborhood)}.com"),
            available_date=self._available_date(),
            highlights=["Great location", "Full amenities", "Convenient transit"],
            website=self._website(title, location),
        )

    def _personalized(
        self, req: UserRequirements, market: LocationMarketData, batch: str, i: int
    ) -> Apartment:
        rng = self._rng
        neighborhood = market.neighborhoods[i % len(market.neighborhoods)]
        title = f"{neighborhood} Residence {i + 1}"

        low = max(req.budget.min, market.price_range.min)
        high = min(req.budget.max, market.price_range.max)
        if low > high:
            low, high = req.budget.min, req.budget.max
        if high <= 0:
            low, high = market.price_range.min, market.price_range.max

        amenities = sorted(req.amenities) or list(market.common_amenities[:5])
        features = [
            label
            for flag, label in (
                (req.pet_friendly, "pet friendly"),
                (req.furnished, "furnished"),
                (req.parking, "parking included"),
            )
            if flag
        ]
        audience = "families" if req.bedrooms >= 2 else "young professionals"

        return Apartment(
            id=f"personalized-{batch}-{i + 1}",
            title=title,
            location=f"{neighborhood}, {req.location}",
            price=max(round(rng.uniform(low, high)), 1),
            bedrooms=req.bedrooms,
            bathrooms=req.bathrooms,
            area=round(rng.uniform(req.area.min, req.area.max)),
            description=(
                f"{req.bedrooms}-bedroom apartment in {neighborhood} with {', '.join(amenities[:3])}"
                f"{'; ' + ', '.join(features) if features else ''}. Suited to {audience}."
            ),
            amenities=amenities,
            rating=round(4.0 + rng.random(), 1),
            distance=round(0.5 + rng.random() * 2, 1),
            commute_time=rng.randint(0, req.commute_time),
            pet_friendly=req.pet_friendly,
            furnished=req.furnished,
            parking=req.parking,
            contact=Contact(phone=f"(555) 555-{2000 + i:04d}", email=f"leasing@{_slug(neighborhood)}.com"),
            available_date=self._available_date(),
            highlights=["Matches your needs", "Great location", "Good value"],
            website=self._website(title, req.location),
        )

    def _available_date(self) -> str:
        roll = self._rng.random()
        if roll < 0.3:
            return "Available now"
        if roll < 0.6:
            return "Next week"
        if roll < 0.8:
            return f"In {self._rng.randint(1, 14)} days"
        return (date.today() + timedelta(days=30)).strftime("%B %d")

    def _website(self, title: str, location: str) -> str:
        platform = self._rng.choice(_LISTING_PLATFORMS)
        token = f"{self._rng.getrandbits(24):06x}"
        return f"{platform}/{_slug(location)}-{_slug(title)}-{token}"
