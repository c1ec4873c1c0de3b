"""Static table of known apartment buildings used for personalized results."""

import logging
import random

from rental_search.models import Apartment, Contact, UserRequirements, UserReviews

logger = logging.getLogger(__name__)

_GYM_ROOFTOP = ("Gym", "Rooftop Deck", "Doorman", "Package Receiving", "Bike Storage")
_GYM_POOL_BC = ("Gym", "Pool", "Business Center", "Package Receiving", "EV Charging")


def _building(
    name, address, price, bedrooms, area, amenities, rating, distance, commute,
    pet_friendly, furnished, parking, phone, email, promotion, pros, cons, website, description,
):
    return {
        "name": name,
        "address": address,
        "price": price,
        "bedrooms": bedrooms,
        "bathrooms": bedrooms,
        "area": area,
        "amenities": list(amenities),
        "rating": rating,
        "distance": distance,
        "commute_time": commute,
        "pet_friendly": pet_friendly,
        "furnished": furnished,
        "parking": parking,
        "contact": {"phone": phone, "email": email},
        "promotions": promotion,
        "pros": pros,
        "cons": cons,
        "website": website,
        "description": description,
    }


REAL_APARTMENTS: dict[str, list[dict]] = {
    "San Francisco": [
        _building(
            "The NEMA", "10 10th St, San Francisco, CA 94103", 3200, 1, 850,
            ("Gym", "Pool", "Parking", "Doorman", "In-Unit Laundry"), 4.2, 0.8, 25, True, False, True,
            "(415) 555-0101", "leasing@thenema.com", "First month free",
            ["Great location", "Full amenities", "Professional management"], ["Pricey", "Tight parking"],
            "https://www.thenema.com",
            "Modern high-rise in SOMA with gym, pool and doorman, close to transit and shopping.",
        ),
        _building(
            "Avalon Mission Bay", "255 King St, San Francisco, CA 94107", 3800, 2, 1100,
            _GYM_POOL_BC, 4.1, 1.2, 30, True, False, True,
            "(415) 555-0102", "leasing@avalonmissionbay.com", "Reduced deposit",
            ["New facilities", "Good location", "Pet friendly"], ["Expensive", "Noisy"],
            "https://www.avalon.com/california/san-francisco-apartments/avalon-mission-bay",
            "Mission Bay community with gym, pool and business center near the ballpark.",
        ),
        _building(
            "The Harrison", "100 Harrison St, San Francisco, CA 94105", 3500, 1, 900,
            _GYM_ROOFTOP, 4.3, 0.5, 20, False, True, False,
            "(415) 555-0103", "info@theharrison.com", "Signing bonus",
            ["Great location", "New facilities", "Well managed"], ["No pets", "No parking"],
            "https://www.theharrison.com",
            "Boutique SOMA building with rooftop deck and doorman, walking distance to FiDi.",
        ),
        _building(
            "One Mission Bay", "255 Channel St, San Francisco, CA 94158", 4200, 2, 1200,
            ("Gym", "Pool", "Rooftop Deck", "Doorman", "Package Receiving"), 4.4, 1.5, 35, True, False, True,
            "(415) 555-0104", "leasing@onemissionbay.com", "First month free",
            ["Luxurious", "Great facilities", "Prime location"], ["Very expensive", "Costly parking"],
            "https://www.onemissionbay.com",
            "Luxury Mission Bay residences with pool and rooftop deck.",
        ),
        _building(
            "The Infinity", "300 Spear St, San Francisco, CA 94105", 3600, 1, 950,
            ("Gym", "Pool", "Doorman", "Package Receiving", "Bike Storage"), 4.0, 0.7, 22, True, False, True,
            "(415) 555-0105", "info@theinfinity.com", "Reduced deposit",
            ["Great location", "New facilities", "Pet friendly"], ["Pricey", "Tight parking"],
            "https://www.theinfinity.com",
            "Modern towers near the Embarcadero with pool, gym and doorman.",
        ),
        _building(
            "Avalon Hayes Valley", "55 Page St, San Francisco, CA 94102", 3400, 1, 880,
            _GYM_ROOFTOP, 4.2, 1.0, 28, True, False, False,
            "(415) 555-0106", "leasing@avalonhayesvalley.com", "Signing bonus",
            ["Great location", "New facilities", "Pet friendly"], ["No parking", "Pricey"],
            "https://www.avalon.com/california/san-francisco-apartments/avalon-hayes-valley",
            "Boutique Hayes Valley building near shops and restaurants.",
        ),
        _building(
            "The Beacon", "250 Beale St, San Francisco, CA 94105", 3300, 1, 850,
            _GYM_ROOFTOP, 4.1, 0.6, 20, False, True, True,
            "(415) 555-0107", "info@thebeacon.com", "First month free",
            ["Great location", "New facilities", "Well managed"], ["No pets", "Pricey"],
            "https://www.thebeacon.com",
            "Modern SOMA building with rooftop deck near the Financial District.",
        ),
        _building(
            "Avalon at Mission Bay", "255 King St, San Francisco, CA 94107", 3900, 2, 1150,
            _GYM_POOL_BC, 4.0, 1.3, 32, True, False, True,
            "(415) 555-0108", "leasing@avalonmissionbay.com", "Reduced deposit",
            ["New facilities", "Good location", "Pet friendly"], ["Expensive", "Noisy"],
            "https://www.avalon.com/california/san-francisco-apartments/avalon-at-mission-bay",
            "Mission Bay community with pool and business center near the ballpark.",
        ),
    ],
    "San Jose": [
        _building(
            "The 88", "88 S 4th St, San Jose, CA 95113", 2800, 1, 800,
            _GYM_ROOFTOP, 4.1, 0.3, 15, True, False, True,
            "(408) 555-0201", "leasing@the88.com", "First month free",
            ["Downtown location", "Modern facilities", "Pet friendly"], ["Pricey", "Tight parking"],
            "https://www.the88.com",
            "Downtown San Jose high-rise with rooftop deck, close to transit.",
        ),
        _building(
            "Avalon Silicon Valley", "777 The Alameda, San Jose, CA 95126", 3200, 2, 1100,
            _GYM_POOL_BC, 4.2, 1.2, 25, True, False, True,
            "(408) 555-0202", "leasing@avalonsiliconvalley.com", "Reduced deposit",
            ["New facilities", "Good location", "Pet friendly"], ["Expensive", "Noisy"],
            "https://www.avalon.com/california/san-jose-apartments/avalon-silicon-valley",
            "Modern community on The Alameda with pool and business center.",
        ),
        _building(
            "The Julian", "100 Julian St, San Jose, CA 95110", 2600, 1, 750,
            _GYM_ROOFTOP, 4.0, 0.8, 18, False, True, False,
            "(408) 555-0203", "info@thejulian.com", "Signing bonus",
            ["Great location", "New facilities", "Well managed"], ["No pets", "No parking"],
            "https://www.thejulian.com",
            "Boutique building near downtown shopping and light rail.",
        ),
        _building(
            "Avalon Willow Glen", "2000 Hamilton Ave, San Jose, CA 95125", 3000, 2, 1000,
            _GYM_POOL_BC, 4.1, 1.5, 30, True, False, True,
            "(408) 555-0204", "leasing@avalonwillowglen.com", "Reduced deposit",
            ["New facilities", "Good location", "Pet friendly"], ["Expensive", "Noisy"],
            "https://www.avalon.com/california/san-jose-apartments/avalon-willow-glen",
            "Willow Glen community with pool and business center.",
        ),
        _building(
            "The 360", "360 S 2nd St, San Jose, CA 95113", 2700, 1, 820,
            _GYM_ROOFTOP, 4.0, 0.4, 16, True, False, True,
            "(408) 555-0205", "info@the360.com", "First month free",
            ["Downtown location", "Modern facilities", "Pet friendly"], ["Pricey", "Tight parking"],
            "https://www.the360.com",
            "Downtown residences with rooftop deck and doorman.",
        ),
        _building(
            "Avalon North San Jose", "3000 N 1st St, San Jose, CA 95134", 2900, 2, 1050,
            _GYM_POOL_BC, 4.1, 2.0, 35, True, False, True,
            "(408) 555-0206", "leasing@avalonnorthsanjose.com", "Reduced deposit",
            ["New facilities", "Good location", "Pet friendly"], ["Expensive", "Noisy"],
            "https://www.avalon.com/california/san-jose-apartments/avalon-north-san-jose",
            "North San Jose community close to tech campuses.",
        ),
        _building(
            "The 88 Downtown", "88 S 4th St, San Jose, CA 95113", 2850, 1, 830,
            _GYM_ROOFTOP, 4.1, 0.3, 15, True, False, True,
            "(408) 555-0207", "info@the88downtown.com", "First month free",
            ["Downtown location", "Modern facilities", "Pet friendly"], ["Pricey", "Tight parking"],
            "https://www.the88downtown.com",
            "Downtown high-rise units with rooftop deck.",
        ),
        _building(
            "Avalon Almaden", "5000 Almaden Expy, San Jose, CA 95118", 3100, 2, 1080,
            _GYM_POOL_BC, 4.2, 2.5, 40, True, False, True,
            "(408) 555-0208", "leasing@avalonalmaden.com", "Reduced deposit",
            ["New facilities", "Good location", "Pet friendly"], ["Expensive", "Noisy"],
            "https://www.avalon.com/california/san-jose-apartments/avalon-almaden",
            "Almaden community with pool, near shopping and transit.",
        ),
    ],
}


def _to_apartment(record: dict, apartment_id: str) -> Apartment:
    return Apartment(
        id=apartment_id,
        title=record["name"],
        location=record["address"],
        price=record["price"],
        bedrooms=record["bedrooms"],
        bathrooms=record["bathrooms"],
        area=record["area"],
        description=record["description"],
        amenities=record["amenities"],
        rating=record["rating"],
        distance=record["distance"],
        commute_time=record["commute_time"],
        pet_friendly=record["pet_friendly"],
        furnished=record["furnished"],
        parking=record["parking"],
        contact=Contact(**record["contact"]),
        highlights=record["pros"],
        promotions=record["promotions"],
        user_reviews=UserReviews(pros=record["pros"], cons=record["cons"]),
        website=record["website"],
    )


def real_apartments(location: str) -> list[Apartment]:
    """All known buildings for a location, in table order."""
    records = REAL_APARTMENTS.get(location, [])
    return [_to_apartment(rec, f"real-{i:03d}") for i, rec in enumerate(records, start=1)]


def select_personalized(
    requirements: UserRequirements,
    count: int,
    rng: random.Random | None = None,
) -> list[Apartment]:
    """Pick up to ``count`` known buildings matching the requirements.

    Buildings must fall within the budget and match bedroom and bathroom
    counts; if too few do, the room-count filter is dropped. The selection
    is shuffled. Returns an empty list for locations with no table.
    """
    rng = rng or random.Random()
    candidates = real_apartments(requirements.location)
    if not candidates:
        return []

    in_budget = [
        apt for apt in candidates
        if requirements.budget.min <= apt.price <= requirements.budget.max
    ]
    selected = [
        apt for apt in in_budget
        if apt.bedrooms == requirements.bedrooms and apt.bathrooms == requirements.bathrooms
    ]
    if len(selected) < count:
        selected = in_budget

    selected = list(selected)
    rng.shuffle(selected)
    logger.info(
        "Selected %d of %d known buildings in %s",
        min(count, len(selected)),
        len(candidates),
        requirements.location,
    )
    return selected[:count]
