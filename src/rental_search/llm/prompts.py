"""Prompt construction for each kind of completion call.

Every builder is a pure function of its arguments.
"""

import json

from rental_search.data.market import LocationMarketData
from rental_search.models import Apartment, MarketStats, RecommendedWebsite, UserRequirements

FULL_SYSTEM_PROMPT = (
    "You are an experienced apartment rental consultant. You analyse renter "
    "requirements, recommend apartments and give rental advice based on real "
    "market data. When asked for JSON, reply with JSON only."
)

FAST_SYSTEM_PROMPT = "Apartment rental consultant. Answer briefly and professionally."


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _requirements_block(req: UserRequirements) -> str:
    amenities = ", ".join(sorted(req.amenities)) or "none specified"
    return (
        f"- Location: {req.location}\n"
        f"- Budget: ${req.budget.min} - ${req.budget.max} per month\n"
        f"- Bedrooms: {req.bedrooms}\n"
        f"- Bathrooms: {req.bathrooms}\n"
        f"- Area: {req.area.min} - {req.area.max} sq ft\n"
        f"- Amenities: {amenities}\n"
        f"- Max commute: {req.commute_time} minutes\n"
        f"- Pet friendly: {_yes_no(req.pet_friendly)}\n"
        f"- Furnished: {_yes_no(req.furnished)}\n"
        f"- Parking required: {_yes_no(req.parking)}"
    )


def requirements_prompt(user_input: str) -> str:
    return f"""Analyse the following rental request and return the renter's requirements as JSON.

Request: "{user_input}"

Return exactly this JSON object:
{{
  "location": "city name",
  "budget": {{"min": minimum monthly rent, "max": maximum monthly rent}},
  "bedrooms": number of bedrooms,
  "bathrooms": number of bathrooms,
  "area": {{"min": minimum sq ft, "max": maximum sq ft}},
  "amenities": ["amenity 1", "amenity 2"],
  "commuteTime": maximum commute in minutes,
  "petFriendly": true or false,
  "furnished": true or false,
  "parking": true or false,
  "description": "the renter's original wording"
}}

Infer anything missing with sensible defaults."""


def listings_prompt(requirements: UserRequirements, count: int) -> str:
    return f"""Find {count} real apartments that match these requirements, as they would appear on
Zillow, Apartments.com or Rent.com. Use real building names and real street addresses.

Requirements:
{_requirements_block(requirements)}

Return a JSON array of exactly {count} objects with ids apt-001 to apt-{count:03d}:
[
  {{
    "id": "apt-001",
    "title": "building name",
    "location": "street address, city, state zip",
    "price": monthly rent as a number,
    "bedrooms": number,
    "bathrooms": number,
    "area": sq ft as a number,
    "rating": number between 4.0 and 5.0,
    "amenities": ["amenity"],
    "description": "short description",
    "availableDate": "move-in date",
    "contact": {{"phone": "phone", "email": "email"}},
    "promotions": "current offer",
    "userReviews": {{"pros": ["pro"], "cons": ["con"]}},
    "website": "official website URL"
  }}
]

Every apartment must have a different name, address and price. Return only the JSON array."""


def pick_ids_prompt(query: str, apartments: list[Apartment]) -> str:
    listing = [
        {
            "id": apt.id,
            "title": apt.title,
            "location": apt.location,
            "price": apt.price,
            "bedrooms": apt.bedrooms,
            "bathrooms": apt.bathrooms,
            "area": apt.area,
            "rating": apt.rating,
            "amenities": apt.amenities,
            "highlights": apt.highlights,
        }
        for apt in apartments
    ]
    return f"""Find the apartments that best match the renter's query.

Query: "{query}"

Apartments:
{json.dumps(listing, indent=2, ensure_ascii=False)}

Reply with the matching apartment ids ordered by relevance, separated by commas,
for example: apt-001, apt-002, apt-003
If nothing matches, reply with an empty string."""


def recommendation_prompt(
    apartments: list[Apartment], requirements: UserRequirements, query: str
) -> str:
    listing = [
        {"id": apt.id, "title": apt.title, "price": apt.price, "bedrooms": apt.bedrooms, "rating": apt.rating}
        for apt in apartments
    ]
    return f"""Recommend apartments for this renter.

Query: "{query}"

Requirements:
{_requirements_block(requirements)}

Candidate apartments:
{json.dumps(listing, indent=2, ensure_ascii=False)}

Return a JSON object:
{{
  "reasoning": "why these apartments fit",
  "recommendations": ["recommendation"],
  "marketInsights": ["insight"],
  "tips": ["tip"]
}}"""


def _market_block(market: LocationMarketData | None) -> str:
    if market is None:
        return "No market data on file for this location; rely on current listings you know of."
    return (
        f"- Average rent: ${market.average_rent}\n"
        f"- Price trend: {market.market_trend}\n"
        f"- Popular neighbourhoods: {', '.join(market.neighborhoods)}\n"
        f"- Characteristics: {market.market_characteristics}\n"
        f"- Market cycle: {market.market_cycle}\n"
        f"- Supply and demand: {market.supply_demand}"
    )


def location_listings_prompt(
    location: str,
    count: int,
    market: LocationMarketData | None,
    websites: list[RecommendedWebsite],
) -> str:
    sites = "\n".join(f"- {site.name}: {site.url} ({site.reason})" for site in websites)
    return f"""Generate {count} real apartment listings in {location}. Every building must exist,
with a street address that can be found on Google Maps.

Market data:
{_market_block(market)}

Listing sites to draw from:
{sites}

Return a JSON array with ids apt-001 to apt-{count:03d}:
[
  {{
    "id": "apt-001",
    "title": "building name",
    "location": "street address, city, state zip",
    "price": monthly rent as a number,
    "bedrooms": number,
    "bathrooms": number,
    "area": sq ft as a number,
    "amenities": ["amenity"],
    "rating": number between 4.0 and 5.0,
    "contact": {{"phone": "leasing office phone", "email": "leasing office email"}},
    "description": "what makes the building and its location stand out",
    "promotions": "current move-in offer",
    "availableDate": "earliest move-in date",
    "userReviews": {{"pros": ["pro"], "cons": ["con"]}},
    "website": "official website URL"
  }}
]

Return only the JSON array."""


def market_analysis_prompt(location: str, market: LocationMarketData | None) -> str:
    return f"""As a real-estate market analyst, write a rental market report for {location}.

Market data:
{_market_block(market)}

Cover: current conditions, price trend (last 6 months, next 3 months), rent by unit
size, hot and emerging neighbourhoods, renter advice, and a short-to-mid-term forecast."""


def market_trends_prompt(location: str, stats: MarketStats) -> str:
    return f"""Summarise the rental market in {location} in under 200 words.

- Average rent: ${stats.average_price}
- Lowest rent: ${stats.price_range.min}
- Highest rent: ${stats.price_range.max}
- Sample size: {stats.sample_size} apartments

Cover current conditions, price trend, renter advice and outlook."""


def question_prompt(
    question: str,
    apartments: list[Apartment] | None = None,
    requirements: UserRequirements | None = None,
) -> str:
    prompt = f'Answer this rental question: "{question}". Be concise and professional, under 100 words.'
    if apartments:
        listing = [
            {
                "id": apt.id,
                "title": apt.title,
                "location": apt.location,
                "price": apt.price,
                "bedrooms": apt.bedrooms,
                "bathrooms": apt.bathrooms,
                "rating": apt.rating,
            }
            for apt in apartments
        ]
        prompt += f"\n\nRelevant apartments:\n{json.dumps(listing, indent=2, ensure_ascii=False)}"
    if requirements is not None:
        prompt += (
            "\n\nRenter requirements:\n"
            f"- Location: {requirements.location}\n"
            f"- Budget: ${requirements.budget.min} - ${requirements.budget.max}\n"
            f"- Bedrooms: {requirements.bedrooms}"
        )
    if apartments or requirements is not None:
        prompt += "\n\nIf the question is not about these apartments, give general rental advice."
    return prompt


def advice_prompt(requirements: UserRequirements, market: MarketStats) -> str:
    return f"""Give personalised rental advice for this renter using the market figures below.

Requirements:
{_requirements_block(requirements)}

Market:
- Average rent: ${market.average_price}
- Rent range: ${market.price_range.min} - ${market.price_range.max}

Cover whether the budget is realistic, where to look, when to sign, practical
tips and which listing sites to check. Under 200 words."""


def neighborhood_prompt(location: str) -> str:
    return f"""Describe what living in {location} is like for a renter.

Return a JSON object:
{{
  "convenience": "shops, groceries and daily errands",
  "transportation": "transit, commute and parking",
  "education": "schools and universities",
  "entertainment": "dining, nightlife and parks",
  "safety": "safety overview",
  "costOfLiving": "cost of living beyond rent"
}}"""
