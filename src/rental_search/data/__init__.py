"""Static market, listing and website tables."""

from rental_search.data.listings import real_apartments, select_personalized
from rental_search.data.market import (
    MARKET_DATA,
    LocationMarketData,
    activity_level,
    extract_location,
    find_market_data,
    get_market_data,
    price_tier,
    stats_from_apartments,
    stats_from_table,
)
from rental_search.data.websites import apartment_websites, build_directory, recommended_websites

__all__ = [
    "MARKET_DATA",
    "LocationMarketData",
    "activity_level",
    "extract_location",
    "find_market_data",
    "get_market_data",
    "price_tier",
    "stats_from_apartments",
    "stats_from_table",
    "real_apartments",
    "select_personalized",
    "apartment_websites",
    "build_directory",
    "recommended_websites",
]
