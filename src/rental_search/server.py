"""Rental Search MCP Server: apartment search tools backed by a chat-completion model."""

import logging
import sys
from typing import Optional

from fastmcp import FastMCP
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from rental_search.config import RentalSearchConfig
from rental_search.data.websites import build_directory
from rental_search.dispatcher import SearchDispatcher, build_cache, failure_response
from rental_search.fallback import FallbackSynthesizer
from rental_search.llm.catalog import AVAILABLE_MODELS
from rental_search.llm.client import ModelGateway
from rental_search.models import (
    DEFAULT_LOCATION,
    ListingRequest,
    NeighborhoodRequest,
    SearchIntent,
    SearchResponse,
    WebsiteCriteria,
    WebsiteDirectory,
)

# Route ALL logging to stderr; stdout is reserved for MCP protocol messages
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="rental-search",
    instructions=(
        "Rental apartment search server. "
        "Use search for natural-language apartment searches, requirement analysis, "
        "recommendations, market analysis and rental questions. "
        "Use generate_listings for listings and a market report for a city, "
        "and neighborhood_info for what living there is like. "
        "Use website_directory to list apartment listing sites for a city. "
        "Use list_models to see which completion models can be selected."
    ),
)

_singleton: SearchDispatcher | None = None


def get_dispatcher() -> SearchDispatcher:
    """Return the module-level SearchDispatcher, building it on first use."""
    global _singleton
    if _singleton is None:
        config = RentalSearchConfig()
        _singleton = SearchDispatcher(
            gateway=ModelGateway(config),
            cache=build_cache(config),
            synthesizer=FallbackSynthesizer(),
            config=config,
        )
    return _singleton


def _dump(response: SearchResponse) -> dict:
    return response.model_dump(by_alias=True, mode="json")


def _invalid(message: str, query: str | None = None) -> SearchResponse:
    return failure_response("Invalid request", message, 400, query)


@mcp.tool()
async def search(
    query: str,
    search_type: Optional[str] = "comprehensive_search",
    user_preferences: Optional[dict] = None,
    model: Optional[str] = None,
    use_real_data: bool = True,
    force_real_data: bool = False,
) -> dict:
    """Search for rental apartments or ask about the rental market.

    Args:
        query: Free-text request, e.g. '2 bedroom in San Jose under $3500 that allows pets'.
        search_type: One of natural_language, requirements_analysis, smart_recommendation,
            market_analysis, qa, comprehensive_search. Unknown values run a comprehensive search.
        user_preferences: Optional structured requirements (budget, bedrooms, amenities, ...)
            used by smart_recommendation instead of analysing the query.
        model: Completion model id (see list_models). Defaults to the configured model.
        use_real_data: When false, listings come from the built-in table instead of the model.
        force_real_data: When true, never substitute placeholder data and skip the cache.

    Returns:
        Response envelope with success flag, typed result data, message and error.
    """
    logger.info("search called: type=%s, query=%r", search_type, query)
    try:
        intent = SearchIntent(
            query=query,
            search_type=search_type,
            user_preferences=user_preferences,
            model=model,
            use_real_data=use_real_data,
            force_real_data=force_real_data,
        )
    except PydanticValidationError as e:
        logger.error("search rejected: %s", e)
        return _dump(_invalid(str(e), query))
    return _dump(await get_dispatcher().dispatch(intent))


@mcp.tool()
async def generate_listings(
    location: str = DEFAULT_LOCATION,
    count: Optional[int] = None,
    requirements: Optional[dict] = None,
    listing_type: str = "general",
    model: Optional[str] = None,
    force_real_data: bool = False,
) -> dict:
    """Generate apartment listings for a city, with a market report.

    Args:
        location: City name, e.g. 'Seattle'.
        count: Number of listings. Defaults to 10 (general) or 8 (personalized).
        requirements: Optional structured requirements (budget, bedrooms, petFriendly, ...).
            When given, the result also carries a recommendation and personal advice.
        listing_type: 'general' asks the model for listings in the city; 'personalized'
            picks known buildings matching the requirements.
        model: Completion model id (see list_models). Defaults to the configured model.
        force_real_data: When true, never substitute placeholder data.

    Returns:
        Response envelope whose data holds apartments, marketAnalysis, stats and dataSource.
    """
    logger.info("generate_listings called: location=%s, type=%s, count=%s", location, listing_type, count)
    try:
        request = ListingRequest(
            location=location,
            count=count,
            requirements=requirements,
            listing_type=listing_type,
            model=model,
            force_real_data=force_real_data,
        )
    except PydanticValidationError as e:
        logger.error("generate_listings rejected: %s", e)
        return _dump(_invalid(str(e)))
    return _dump(await get_dispatcher().generate_listings(request))


@mcp.tool()
async def neighborhood_info(
    location: str = DEFAULT_LOCATION,
    model: Optional[str] = None,
    force_real_data: bool = False,
) -> dict:
    """Describe what living in a city is like: transport, schools, safety, costs.

    Args:
        location: City name, e.g. 'Austin'.
        model: Completion model id (see list_models).
        force_real_data: When true, fail instead of returning placeholder text.

    Returns:
        Response envelope whose data holds the city's known neighbourhoods and an info block.
    """
    logger.info("neighborhood_info called: location=%s", location)
    try:
        request = NeighborhoodRequest(location=location, model=model, force_real_data=force_real_data)
    except PydanticValidationError as e:
        logger.error("neighborhood_info rejected: %s", e)
        return _dump(_invalid(str(e)))
    return _dump(await get_dispatcher().neighborhood_info(request))


def _website_success(directory: WebsiteDirectory) -> dict:
    return {"success": True, "data": directory.model_dump(by_alias=True, mode="json")}


def _website_failure(message: str) -> dict:
    return {"success": False, "error": "Invalid request", "message": message}


@mcp.tool()
async def website_directory(
    location: str = DEFAULT_LOCATION,
    criteria: Optional[dict] = None,
) -> dict:
    """List apartment listing websites for a city, with recommendations.

    Args:
        location: City name, e.g. 'San Francisco'. Local sites are added for known cities.
        criteria: Optional hints: petFriendly (bool), budget ({min, max}), commuteTime (minutes).

    Returns:
        Envelope whose data holds all listing sites plus up to five recommended ones with reasons.
    """
    logger.info("website_directory called: location=%s", location)
    try:
        parsed = WebsiteCriteria.model_validate(criteria or {})
    except PydanticValidationError as e:
        logger.error("website_directory rejected: %s", e)
        return _website_failure(str(e))
    return _website_success(build_directory(location, parsed))


@mcp.tool()
async def list_models() -> dict:
    """List the completion models that can be passed as `model` to search."""
    return {
        "models": [m.model_dump() for m in AVAILABLE_MODELS],
        "default": get_dispatcher().config.default_model,
    }


# --- Plain HTTP routes, served when running with the http transport ---


def _json(response: SearchResponse) -> JSONResponse:
    return JSONResponse(_dump(response), status_code=response.status_code)


async def _json_body(request: Request) -> dict | None:
    """The request's JSON object, or None when the body is not one."""
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


@mcp.custom_route("/search", methods=["GET", "POST"])
async def search_route(request: Request) -> JSONResponse:
    if request.method == "GET":
        raw = {"query": request.query_params.get("q", ""), "searchType": request.query_params.get("type")}
    else:
        raw = await _json_body(request)
        if raw is None:
            return _json(_invalid("Request body must be a JSON object"))

    try:
        intent = SearchIntent.model_validate(raw)
    except PydanticValidationError as e:
        logger.error("POST /search rejected: %s", e)
        query = raw.get("query")
        return _json(_invalid(str(e), query if isinstance(query, str) else None))
    return _json(await get_dispatcher().dispatch(intent))


@mcp.custom_route("/listings", methods=["GET", "POST"])
async def listings_route(request: Request) -> JSONResponse:
    if request.method == "GET":
        params = request.query_params
        raw = {key: params[key] for key in ("location", "count", "type", "model") if key in params}
    else:
        raw = await _json_body(request)
        if raw is None:
            return _json(_invalid("Request body must be a JSON object"))

    try:
        listing_request = ListingRequest.model_validate(raw)
    except PydanticValidationError as e:
        logger.error("%s /listings rejected: %s", request.method, e)
        return _json(_invalid(str(e)))
    return _json(await get_dispatcher().generate_listings(listing_request))


@mcp.custom_route("/neighborhood", methods=["GET"])
async def neighborhood_route(request: Request) -> JSONResponse:
    params = request.query_params
    neighborhood_request = NeighborhoodRequest(location=params.get("location"), model=params.get("model"))
    return _json(await get_dispatcher().neighborhood_info(neighborhood_request))


@mcp.custom_route("/websites", methods=["GET", "POST"])
async def websites_route(request: Request) -> JSONResponse:
    if request.method == "GET":
        params = request.query_params
        location = params.get("city") or params.get("location") or DEFAULT_LOCATION
        raw_criteria: dict = {"petFriendly": params.get("petFriendly", "false")}
        if params.get("budget"):
            raw_criteria["budget"] = {"max": params["budget"]}
        if params.get("commuteTime"):
            raw_criteria["commuteTime"] = params["commuteTime"]
    else:
        body = await _json_body(request)
        if body is None:
            return JSONResponse(_website_failure("Request body must be a JSON object"), status_code=400)
        location = body.get("location") or DEFAULT_LOCATION
        raw_criteria = body.get("criteria") or {}

    try:
        criteria = WebsiteCriteria.model_validate(raw_criteria)
    except PydanticValidationError as e:
        return JSONResponse(_website_failure(str(e)), status_code=400)
    return JSONResponse(_website_success(build_directory(str(location), criteria)))


@mcp.custom_route("/health", methods=["GET"])
async def health_route(request: Request) -> JSONResponse:
    dispatcher = get_dispatcher()
    connected = await dispatcher.gateway.check_status()
    return JSONResponse(
        {
            "status": "ok",
            "modelApi": "connected" if connected else "unavailable",
            "defaultModel": dispatcher.config.default_model,
            "cachedEntries": len(dispatcher.cache),
        }
    )


def main() -> None:
    config = RentalSearchConfig()
    if config.transport == "http":
        mcp.run(transport="http", host=config.http_host, port=config.http_port)
    else:
        mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
