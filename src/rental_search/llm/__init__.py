"""Chat-completion gateway, prompts and reply parsing."""

from rental_search.llm.catalog import AVAILABLE_MODELS, DEFAULT_MODEL, estimate_cost, get_model_config
from rental_search.llm.client import CompletionOptions, ModelGateway, ModelReply, Profile
from rental_search.llm.parsers import (
    extract_structured,
    normalize_apartment,
    parse_apartments,
    parse_id_list,
    parse_neighborhood,
    parse_recommendation,
    parse_requirements,
)

__all__ = [
    "AVAILABLE_MODELS",
    "DEFAULT_MODEL",
    "estimate_cost",
    "get_model_config",
    "CompletionOptions",
    "ModelGateway",
    "ModelReply",
    "Profile",
    "extract_structured",
    "normalize_apartment",
    "parse_apartments",
    "parse_id_list",
    "parse_neighborhood",
    "parse_recommendation",
    "parse_requirements",
]
