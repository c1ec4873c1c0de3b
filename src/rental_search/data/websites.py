"""Static directory of apartment listing websites."""

from rental_search.models import RecommendedWebsite, Website, WebsiteCriteria, WebsiteDirectory

LISTING_SITES: tuple[Website, ...] = (
    Website(
        name="Apartments.com",
        url="https://www.apartments.com",
        description="One of the largest US apartment search sites",
        features=["Detailed filters", "Virtual tours", "Online applications"],
    ),
    Website(
        name="Zillow",
        url="https://www.zillow.com",
        description="Full-service real-estate marketplace",
        features=["Rent estimates", "Neighbourhood info", "Price history"],
    ),
    Website(
        name="Trulia",
        url="https://www.trulia.com",
        description="Detailed neighbourhood and property information",
        features=["Neighbourhood ratings", "Crime maps", "School info"],
    ),
    Website(
        name="Rent.com",
        url="https://www.rent.com",
        description="Rental-focused listing platform",
        features=["Rent comparison", "Online applications", "Tenant reviews"],
    ),
    Website(
        name="HotPads",
        url="https://www.hotpads.com",
        description="Map-based rental search",
        features=["Map search", "Commute times", "Nearby amenities"],
    ),
    Website(
        name="PadMapper",
        url="https://www.padmapper.com",
        description="Map-first rental platform",
        features=["Map interface", "Price filters", "Commute calculator"],
    ),
    Website(
        name="RentCafe",
        url="https://www.rentcafe.com",
        description="Platform run with property management companies",
        features=["Online applications", "Rent payment", "Maintenance requests"],
    ),
    Website(
        name="Apartment Finder",
        url="https://www.apartmentfinder.com",
        description="Long-standing apartment search site",
        features=["Detailed filters", "Virtual tours", "Renter services"],
    ),
    Website(
        name="Rentals.com",
        url="https://www.rentals.com",
        description="General rental listings",
        features=["Listing search", "Online applications", "Renter tools"],
    ),
    Website(
        name="ForRent.com",
        url="https://www.forrent.com",
        description="Dedicated rental site",
        features=["Listing search", "Community info", "Renter resources"],
    ),
)

CITY_SITES: dict[str, tuple[str, ...]] = {
    "san francisco": ("craigslist.org/sfc", "sfgate.com/real-estate", "sf.curbed.com"),
    "new york": ("streeteasy.com", "ny.curbed.com", "ny.racked.com"),
    "los angeles": ("la.curbed.com", "westside-rentals.com", "la.racked.com"),
    "chicago": ("chicago.curbed.com", "domu.com", "chicago.racked.com"),
    "seattle": ("seattle.curbed.com", "seattle.racked.com"),
}

MAX_RECOMMENDATIONS = 5
AFFORDABLE_BUDGET = 2000


def apartment_websites(city: str | None = None) -> list[Website]:
    """General listing sites plus any local ones known for ``city``."""
    websites = list(LISTING_SITES)
    if city:
        for site in CITY_SITES.get(city.strip().lower(), ()):
            websites.append(
                Website(
                    name=site.split(".")[0].upper(),
                    url=f"https://{site}",
                    description=f"Local rental listings for {city}",
                    features=["Local listings", "Neighbourhood info", "Local services"],
                )
            )
    return websites


def recommended_websites(criteria: WebsiteCriteria | None = None) -> list[RecommendedWebsite]:
    criteria = criteria or WebsiteCriteria()
    picks: list[RecommendedWebsite] = []
    if criteria.pet_friendly:
        picks.append(
            RecommendedWebsite(name="Zillow", url="https://www.zillow.com", reason="Detailed pet policy filters")
        )
    if criteria.budget and criteria.budget.max is not None and criteria.budget.max < AFFORDABLE_BUDGET:
        picks.append(
            RecommendedWebsite(name="HotPads", url="https://www.hotpads.com", reason="Good for affordable listings")
        )
    if criteria.commute_time:
        picks.append(
            RecommendedWebsite(name="PadMapper", url="https://www.padmapper.com", reason="Built-in commute calculator")
        )
    picks.extend(
        [
            RecommendedWebsite(
                name="Apartments.com", url="https://www.apartments.com", reason="Largest inventory and strong filters"
            ),
            RecommendedWebsite(name="Rent.com", url="https://www.rent.com", reason="Rental-focused, easy to use"),
        ]
    )
    return picks[:MAX_RECOMMENDATIONS]


def build_directory(location: str, criteria: WebsiteCriteria | None = None) -> WebsiteDirectory:
    return WebsiteDirectory(
        location=location,
        all_websites=apartment_websites(location),
        recommended_websites=recommended_websites(criteria),
    )
