"""Static rental market table and market statistics."""

import logging
import re
from dataclasses import dataclass

from rental_search.models import DEFAULT_LOCATION, Apartment, MarketStats, Range

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationMarketData:
    average_rent: int
    price_range: Range
    neighborhoods: tuple[str, ...]
    common_amenities: tuple[str, ...]
    market_trend: str
    market_characteristics: str
    market_cycle: str
    supply_demand: str


MARKET_DATA: dict[str, LocationMarketData] = {
    "San Francisco": LocationMarketData(
        average_rent=3500,
        price_range=Range(min=2500, max=8000),
        neighborhoods=(
            "Mission District", "SOMA", "North Beach", "Marina",
            "Pacific Heights", "Hayes Valley", "Castro", "Noe Valley",
        ),
        common_amenities=("Gym", "Pool", "Doorman", "Parking", "In-Unit Laundry", "Balcony", "Central AC"),
        market_trend="Stable rents with strong demand for luxury units",
        market_characteristics="Tech hub, culturally diverse, good transit",
        market_cycle="Mature market, supply and demand roughly balanced",
        supply_demand="Ample supply, strong high-end demand",
    ),
    "San Jose": LocationMarketData(
        average_rent=3300,
        price_range=Range(min=2800, max=5500),
        neighborhoods=(
            "Downtown San Jose", "North San Jose", "Willow Glen",
            "Almaden Valley", "Cambrian Park", "Evergreen",
        ),
        common_amenities=("Gym", "Pool", "Business Center", "Package Receiving", "EV Charging", "High-Speed Internet"),
        market_trend="Tech employment pushing rents steadily upward",
        market_characteristics="Heart of Silicon Valley, dense tech employers",
        market_cycle="Expansion, demand still growing",
        supply_demand="Limited supply, strong demand",
    ),
    "New York": LocationMarketData(
        average_rent=4200,
        price_range=Range(min=3000, max=10000),
        neighborhoods=("Manhattan", "Brooklyn", "Queens", "Bronx", "Staten Island"),
        common_amenities=("Doorman", "Gym", "Laundry Room", "Elevator", "Storage", "Package Receiving"),
        market_trend="Rents edging up, Manhattan demand strong",
        market_characteristics="Financial and cultural capital, extensive transit",
        market_cycle="Mature market with cyclical swings",
        supply_demand="Tight supply, steady high-end demand",
    ),
    "Los Angeles": LocationMarketData(
        average_rent=2800,
        price_range=Range(min=2000, max=6000),
        neighborhoods=("Hollywood", "Downtown LA", "Santa Monica", "Venice", "West Hollywood", "Beverly Hills"),
        common_amenities=("Pool", "Gym", "Parking", "Balcony", "Central AC", "In-Unit Laundry"),
        market_trend="Moderate rent growth, coastal areas in demand",
        market_characteristics="Entertainment capital, mild climate, car culture",
        market_cycle="Steady growth",
        supply_demand="Ample supply, varied demand",
    ),
    "Seattle": LocationMarketData(
        average_rent=2200,
        price_range=Range(min=1800, max=5000),
        neighborhoods=("Capitol Hill", "Downtown", "Ballard", "Fremont", "Queen Anne", "Belltown"),
        common_amenities=("Gym", "Bike Storage", "Package Receiving", "Community Room", "Rooftop Deck"),
        market_trend="Tech sector driving rents up",
        market_characteristics="Tech hub with outdoor access and a diverse culture",
        market_cycle="Expansion",
        supply_demand="Supply growing, demand strong",
    ),
    "Austin": LocationMarketData(
        average_rent=1800,
        price_range=Range(min=1500, max=4000),
        neighborhoods=("Downtown", "East Austin", "South Congress", "Zilker", "Hyde Park", "West Campus"),
        common_amenities=("Pool", "Gym", "Dog Park", "Bike Storage", "Package Lockers", "Community Lounge"),
        market_trend="Fast growth as tech companies relocate",
        market_characteristics="Live music capital, emerging tech city, lower cost of living",
        market_cycle="Emerging market in rapid growth",
        supply_demand="Supply rising quickly, demand strong",
    ),
    "Santa Clara": LocationMarketData(
        average_rent=3200,
        price_range=Range(min=2500, max=6000),
        neighborhoods=("Downtown Santa Clara", "North San Jose", "Sunnyvale", "Mountain View", "Palo Alto"),
        common_amenities=("Gym", "Pool", "Business Center", "Package Receiving", "EV Charging", "High-Speed Internet"),
        market_trend="Tech sector keeping rents rising",
        market_characteristics="Silicon Valley core, highly educated workforce",
        market_cycle="Mature market, steady growth",
        supply_demand="Limited supply, strong high-end demand",
    ),
}

# Cities recognised in free text besides the table keys, plus short forms.
KNOWN_CITIES: tuple[str, ...] = (
    "Oakland", "Palo Alto", "Mountain View", "Cupertino", "Sunnyvale",
    "Fremont", "Berkeley", "Redwood City", "Menlo Park",
    "Chicago", "Boston", "Denver", "Miami", "Portland", "San Diego",
    "Dallas", "Houston", "Atlanta", "Philadelphia",
)

LOCATION_ALIASES: dict[str, str] = {
    "SF": "San Francisco",
    "SJ": "San Jose",
    "NYC": "New York",
    "LA": "Los Angeles",
}


def _location_patterns() -> list[tuple[re.Pattern, str]]:
    names = {name: name for name in (*MARKET_DATA, *KNOWN_CITIES)}
    names.update(LOCATION_ALIASES)
    patterns = []
    # Longest first so "San Jose" wins over shorter overlapping names.
    for alias in sorted(names, key=len, reverse=True):
        flags = 0 if alias.isupper() else re.IGNORECASE
        patterns.append((re.compile(rf"\b{re.escape(alias)}\b", flags), names[alias]))
    return patterns


_PATTERNS = _location_patterns()


def extract_location(text: str, default: str = DEFAULT_LOCATION) -> str:
    """Return the first known city mentioned in ``text``, else ``default``."""
    for pattern, canonical in _PATTERNS:
        if pattern.search(text or ""):
            return canonical
    return default


def find_market_data(location: str) -> tuple[str, LocationMarketData] | None:
    """Look up the table row for a location, or None when there is none.

    Matching is case-insensitive on table keys, then on the first known
    city or alias mentioned in ``location``.
    """
    wanted = (location or "").strip().lower()
    for key, data in MARKET_DATA.items():
        if key.lower() == wanted:
            return key, data
    canonical = extract_location(location, default="")
    if canonical in MARKET_DATA:
        return canonical, MARKET_DATA[canonical]
    return None


def get_market_data(location: str) -> tuple[str, LocationMarketData]:
    """Like find_market_data, but unknown locations use the default row.

    The returned key says which row was used.
    """
    found = find_market_data(location)
    if found is not None:
        return found
    logger.info("No market data for %r, using %s", location, DEFAULT_LOCATION)
    return DEFAULT_LOCATION, MARKET_DATA[DEFAULT_LOCATION]


def stats_from_table(data: LocationMarketData) -> MarketStats:
    return MarketStats(average_price=data.average_rent, price_range=data.price_range, sample_size=0)


def stats_from_apartments(apartments: list[Apartment]) -> MarketStats:
    """Average and price range of a listing batch; zeros for an empty batch."""
    if not apartments:
        return MarketStats()
    prices = [apt.price for apt in apartments]
    return MarketStats(
        average_price=round(sum(prices) / len(prices)),
        price_range=Range(min=min(prices), max=max(prices)),
        sample_size=len(prices),
    )


def price_tier(stats: MarketStats, high: int, medium: int) -> str:
    """Label the rent level: ``high`` above ``high``, ``medium`` above ``medium``."""
    if stats.average_price > high:
        return "high"
    if stats.average_price > medium:
        return "medium"
    return "low"


def activity_level(stats: MarketStats, high_ratio: float, medium_ratio: float) -> str:
    """Label market activity by the price spread relative to the average rent."""
    if stats.average_price <= 0:
        return "low"
    ratio = (stats.price_range.max - stats.price_range.min) / stats.average_price
    if ratio > high_ratio:
        return "high"
    if ratio > medium_ratio:
        return "medium"
    return "low"
