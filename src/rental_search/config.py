"""Configuration for the rental search MCP server."""

from pydantic_settings import BaseSettings


class RentalSearchConfig(BaseSettings):
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    default_model: str = "gpt-4o"
    timeout_seconds: float = 60.0

    # Completion profiles
    full_max_tokens: int = 2000
    full_temperature: float = 0.2
    fast_max_tokens: int = 200
    fast_temperature: float = 0.1

    # Response cache
    cache_max_age_seconds: int = 120
    qa_cache_max_age_seconds: int = 1800
    comprehensive_bucket_seconds: int = 120

    # Listing batch sizes
    natural_language_candidates: int = 20
    personalized_listing_count: int = 8
    analysis_listing_count: int = 10
    fallback_listing_count: int = 8
    generated_listing_count: int = 10
    qa_context_listings: int = 5

    # Market label thresholds (placeholder heuristic)
    price_tier_high: int = 4000
    price_tier_medium: int = 3000
    activity_high_ratio: float = 0.8
    activity_medium_ratio: float = 0.5

    # "stdio" for MCP clients, "http" to also serve the JSON routes
    transport: str = "stdio"
    http_host: str = "127.0.0.1"
    http_port: int = 8000

    model_config = {"env_prefix": "RENTAL_SEARCH_"}
