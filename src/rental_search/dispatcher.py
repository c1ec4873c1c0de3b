"""Search orchestration: cache lookup, model calls, parsing and fallback."""

import logging
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Union

from rental_search.cache import RequestCache
from rental_search.config import RentalSearchConfig
from rental_search.data.listings import real_apartments, select_personalized
from rental_search.data.market import (
    MARKET_DATA,
    LocationMarketData,
    activity_level,
    extract_location,
    find_market_data,
    price_tier,
    stats_from_apartments,
    stats_from_table,
)
from rental_search.data.websites import recommended_websites
from rental_search.errors import (
    ModelGatewayError,
    ParseError,
    RentalSearchError,
    SynthesisNotAvailable,
    ValidationError,
)
from rental_search.fallback import FallbackSynthesizer
from rental_search.llm import prompts
from rental_search.llm.client import ModelGateway, Profile
from rental_search.llm.parsers import (
    parse_apartments,
    parse_id_list,
    parse_neighborhood,
    parse_recommendation,
    parse_requirements,
)
from rental_search.models import (
    DEFAULT_LOCATION,
    Apartment,
    BudgetCap,
    ComprehensiveSearchResult,
    DataSource,
    ListingRequest,
    ListingsResult,
    MarketAnalysisResult,
    NaturalLanguageResult,
    NeighborhoodInfo,
    NeighborhoodRequest,
    NeighborhoodResult,
    QuestionAnswerResult,
    RequirementsAnalysis,
    RequirementsAnalysisResult,
    SearchIntent,
    SearchPayload,
    SearchResponse,
    SearchType,
    SmartRecommendationResult,
    UserRequirements,
    WebsiteCriteria,
)

logger = logging.getLogger(__name__)

# Failures that may be replaced by fallback data outside strict mode.
MODEL_FAILURES = (ModelGatewayError, ParseError)

MAX_MATCHES = 8
MARKET_ANALYSIS_UNAVAILABLE = "Market analysis is temporarily unavailable."
QA_UNAVAILABLE = "Sorry, this question cannot be answered right now. Please try again later."

# Anything that names a model and may demand strict real data.
ModelRequest = Union[SearchIntent, ListingRequest, NeighborhoodRequest]


def build_cache(config: RentalSearchConfig) -> RequestCache:
    """Cache with the per-search-type ages the dispatcher relies on."""
    return RequestCache(
        default_max_age=config.cache_max_age_seconds,
        max_ages={SearchType.QUESTION_ANSWER: config.qa_cache_max_age_seconds},
        bypass=(SearchType.COMPREHENSIVE_SEARCH,),
    )


def failure_response(
    error: str,
    message: str,
    status_code: int = 500,
    query: str | None = None,
    search_type: SearchType | None = None,
) -> SearchResponse:
    return SearchResponse(
        success=False,
        data=None,
        error=error,
        message=message,
        query=query,
        search_type=search_type,
        status_code=status_code,
    )


class SearchDispatcher:
    """Routes a SearchIntent to its handler and wraps the outcome in an envelope.

    Successful envelopes are cached by fingerprint. Model and parse failures
    are replaced by fallback data unless the intent asks for strict real data,
    in which case they surface as SynthesisNotAvailable. No exception leaves
    ``dispatch``, ``generate_listings`` or ``neighborhood_info``; the latter
    two follow the same fallback policy but bypass the cache.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        cache: RequestCache,
        synthesizer: FallbackSynthesizer | None = None,
        config: RentalSearchConfig | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._gateway = gateway
        self._cache = cache
        self._synthesizer = synthesizer or FallbackSynthesizer()
        self._config = config or RentalSearchConfig()
        self._clock = clock
        self._handlers: dict[SearchType, Callable[[SearchIntent], Awaitable[SearchPayload]]] = {
            SearchType.NATURAL_LANGUAGE: self._natural_language,
            SearchType.REQUIREMENTS_ANALYSIS: self._requirements_analysis,
            SearchType.SMART_RECOMMENDATION: self._smart_recommendation,
            SearchType.MARKET_ANALYSIS: self._market_analysis,
            SearchType.QUESTION_ANSWER: self._question_answer,
            SearchType.COMPREHENSIVE_SEARCH: self._comprehensive_search,
        }

    @property
    def gateway(self) -> ModelGateway:
        return self._gateway

    @property
    def cache(self) -> RequestCache:
        return self._cache

    @property
    def config(self) -> RentalSearchConfig:
        return self._config

    def fingerprint(self, intent: SearchIntent) -> str:
        key = f"{intent.query}-{intent.search_type.value}-{intent.model or 'default'}"
        if intent.search_type is SearchType.COMPREHENSIVE_SEARCH:
            bucket = int(self._clock() // self._config.comprehensive_bucket_seconds)
            key = f"{key}-{bucket}"
        return key

    async def dispatch(self, intent: SearchIntent) -> SearchResponse:
        search_type = intent.search_type
        try:
            if not intent.query.strip():
                raise ValidationError("A search query is required")

            key = self.fingerprint(intent)
            if not intent.force_real_data:
                cached = self._cache.get(key)
                if cached is not None:
                    logger.info("Cache hit: %s", key)
                    return cached

            logger.info("Dispatching %s search: %r", search_type.value, intent.query)
            payload = await self._handlers[search_type](intent)
        except RentalSearchError as exc:
            logger.error("%s search failed: %s", search_type.value, exc)
            return failure_response(exc.label, str(exc), exc.status_code, intent.query, search_type)
        except Exception as exc:
            logger.exception("Unexpected error in %s search", search_type.value)
            return failure_response("Search failed", str(exc) or type(exc).__name__, 500, intent.query, search_type)

        response = SearchResponse(
            success=True,
            data=payload,
            query=intent.query,
            search_type=search_type,
            message="Search complete",
        )
        self._cache.put(key, response, search_type)
        logger.info("Cached %s result: %s", search_type.value, key)
        return response

    async def generate_listings(self, request: ListingRequest) -> SearchResponse:
        """Listings for a location with a market report; never cached."""
        logger.info(
            "Generating %s listings for %s (count=%s)", request.listing_type.value, request.location, request.count
        )
        return await self._envelope("Listing generation", self._listings(request), "Listings generated")

    async def neighborhood_info(self, request: NeighborhoodRequest) -> SearchResponse:
        logger.info("Describing neighbourhoods of %s", request.location)
        return await self._envelope("Neighbourhood info", self._neighborhood(request), "Neighbourhood info ready")

    async def _envelope(self, name: str, work: Awaitable[SearchPayload], message: str) -> SearchResponse:
        try:
            payload = await work
        except RentalSearchError as exc:
            logger.error("%s failed: %s", name, exc)
            return failure_response(exc.label, str(exc), exc.status_code)
        except Exception as exc:
            logger.exception("Unexpected error in %s", name.lower())
            return failure_response(f"{name} failed", str(exc) or type(exc).__name__)
        return SearchResponse(success=True, data=payload, message=message)

    # --- shared steps ---

    async def _complete(self, prompt: str, profile: Profile, intent: ModelRequest) -> str:
        options = self._gateway.options_for(profile, intent.model)
        reply = await self._gateway.complete(prompt, options)
        return reply.content

    def _degrade(self, intent: ModelRequest, exc: Exception, step: str) -> None:
        """Allow a fallback for ``step``, or raise in strict real-data mode."""
        if intent.force_real_data:
            raise SynthesisNotAvailable(f"{step} failed in strict real-data mode: {exc}") from exc
        logger.warning("%s failed, using fallback: %s", step, exc)

    def _synthesize(
        self, intent: ModelRequest, location: str, count: int, requirements: UserRequirements | None = None
    ) -> list[Apartment]:
        if intent.force_real_data:
            raise SynthesisNotAvailable(f"No real listings available for {location}")
        return self._synthesizer.synthesize(location, count, requirements)

    async def _analyze_requirements(self, intent: SearchIntent) -> tuple[UserRequirements, bool]:
        """Extract requirements from the query. Returns (requirements, extracted)."""
        location = extract_location(intent.query)
        try:
            content = await self._complete(prompts.requirements_prompt(intent.query), Profile.FULL, intent)
            return parse_requirements(content, location), True
        except MODEL_FAILURES as exc:
            self._degrade(intent, exc, "Requirements analysis")
            return UserRequirements(location=location, description=intent.query), False

    def _known_or_synthesized(
        self, intent: ModelRequest, requirements: UserRequirements, count: int
    ) -> tuple[list[Apartment], DataSource]:
        apartments = select_personalized(requirements, count)
        if apartments:
            return apartments, DataSource.STATIC_TABLE
        apartments = self._synthesize(intent, requirements.location, count, requirements)
        return apartments, DataSource.FALLBACK

    # --- handlers, one per search type ---

    async def _natural_language(self, intent: SearchIntent) -> NaturalLanguageResult:
        location = extract_location(intent.query)
        candidates = real_apartments(location)
        source = DataSource.STATIC_TABLE
        if not candidates:
            candidates = self._synthesize(intent, location, self._config.natural_language_candidates)
            source = DataSource.FALLBACK

        try:
            content = await self._complete(prompts.pick_ids_prompt(intent.query, candidates), Profile.FULL, intent)
        except MODEL_FAILURES as exc:
            self._degrade(intent, exc, "Listing match")
            matches = candidates[:MAX_MATCHES]
        else:
            by_id = {apt.id: apt for apt in candidates}
            matches = []
            for apartment_id in parse_id_list(content):
                apartment = by_id.pop(apartment_id, None)
                if apartment is not None:
                    matches.append(apartment)

        return NaturalLanguageResult(
            query=intent.query,
            location=location,
            apartments=matches[:MAX_MATCHES],
            data_source=source,
        )

    async def _requirements_analysis(self, intent: SearchIntent) -> RequirementsAnalysisResult:
        requirements, _ = await self._analyze_requirements(intent)
        apartments, source = self._known_or_synthesized(
            intent, requirements, self._config.analysis_listing_count
        )
        return RequirementsAnalysisResult(
            requirements=requirements,
            apartments=apartments,
            analysis=RequirementsAnalysis(original_input=intent.query, extracted_requirements=requirements),
            data_source=source,
        )

    async def _smart_recommendation(self, intent: SearchIntent) -> SmartRecommendationResult:
        requirements = intent.user_preferences
        if requirements is None:
            requirements, _ = await self._analyze_requirements(intent)
        apartments, source = self._known_or_synthesized(
            intent, requirements, self._config.personalized_listing_count
        )

        recommendation = None
        try:
            content = await self._complete(
                prompts.recommendation_prompt(apartments, requirements, intent.query), Profile.FULL, intent
            )
            recommendation = parse_recommendation(content)
        except MODEL_FAILURES as exc:
            self._degrade(intent, exc, "Recommendation")

        return SmartRecommendationResult(
            requirements=requirements,
            apartments=apartments,
            recommendation=recommendation,
            data_source=source,
        )

    async def _market_analysis(self, intent: SearchIntent) -> MarketAnalysisResult:
        # Stats come from the static table only; this search never lists apartments.
        found = find_market_data(intent.query)
        source = DataSource.MODEL
        if found is None:
            if intent.force_real_data:
                raise SynthesisNotAvailable(f"No market data for {intent.query!r}")
            logger.warning("No market data for %r, reporting %s instead", intent.query, DEFAULT_LOCATION)
            found = DEFAULT_LOCATION, MARKET_DATA[DEFAULT_LOCATION]
            source = DataSource.FALLBACK
        location, market = found
        stats = stats_from_table(market)
        try:
            narrative = await self._complete(
                prompts.market_analysis_prompt(location, market), Profile.FULL, intent
            )
        except MODEL_FAILURES as exc:
            self._degrade(intent, exc, "Market analysis")
            narrative = MARKET_ANALYSIS_UNAVAILABLE
            if source is DataSource.MODEL:
                source = DataSource.STATIC_TABLE

        cfg = self._config
        return MarketAnalysisResult(
            location=location,
            apartments=[],
            market_analysis=narrative.strip(),
            stats=stats,
            price_tier=price_tier(stats, cfg.price_tier_high, cfg.price_tier_medium),
            activity_level=activity_level(stats, cfg.activity_high_ratio, cfg.activity_medium_ratio),
            data_source=source,
        )

    async def _question_answer(self, intent: SearchIntent) -> QuestionAnswerResult:
        # Known buildings for the city in question (or the renter's own
        # preferences) are handed to the model as context.
        limit = self._config.qa_context_listings
        requirements = intent.user_preferences
        if requirements is not None:
            context = select_personalized(requirements, limit) or real_apartments(requirements.location)[:limit]
        else:
            context = real_apartments(extract_location(intent.query, default=""))[:limit]

        try:
            answer = await self._complete(
                prompts.question_prompt(intent.query, context, requirements), Profile.FAST, intent
            )
            source = DataSource.MODEL_DIRECT
        except MODEL_FAILURES as exc:
            self._degrade(intent, exc, "Question answering")
            answer = QA_UNAVAILABLE
            source = DataSource.FALLBACK
        return QuestionAnswerResult(
            question=intent.query,
            answer=answer.strip(),
            context_apartments=context,
            data_source=source,
        )

    async def _comprehensive_search(self, intent: SearchIntent) -> ComprehensiveSearchResult:
        # Steps run in order; once one fails the later model calls are skipped
        # and their fields take defaults.
        count = self._config.fallback_listing_count
        requirements, extracted = await self._analyze_requirements(intent)
        aborted = not extracted

        if aborted:
            apartments = self._synthesize(intent, requirements.location, count, requirements)
            source = DataSource.FALLBACK
        elif not intent.use_real_data:
            apartments, source = self._known_or_synthesized(intent, requirements, count)
        else:
            try:
                content = await self._complete(prompts.listings_prompt(requirements, count), Profile.FULL, intent)
                apartments = parse_apartments(content)
                source = DataSource.MODEL
            except MODEL_FAILURES as exc:
                self._degrade(intent, exc, "Listing search")
                aborted = True
                apartments = self._synthesize(intent, requirements.location, count, requirements)
                source = DataSource.FALLBACK

        stats = stats_from_apartments(apartments)
        narrative = MARKET_ANALYSIS_UNAVAILABLE
        if not aborted:
            try:
                narrative = await self._complete(
                    prompts.market_trends_prompt(requirements.location, stats), Profile.FAST, intent
                )
            except MODEL_FAILURES as exc:
                self._degrade(intent, exc, "Market summary")

        return ComprehensiveSearchResult(
            query=intent.query,
            location=requirements.location,
            requirements=requirements,
            apartments=apartments,
            market_analysis=narrative.strip(),
            stats=stats,
            data_source=source,
        )

    # --- listing generation and neighbourhood info ---

    async def _listings(self, request: ListingRequest) -> ListingsResult:
        cfg = self._config
        requirements = request.requirements
        location = requirements.location if request.personalized else request.location
        found = find_market_data(location)
        market = found[1] if found else None
        if request.personalized:
            count = request.count or cfg.personalized_listing_count
            apartments, source = self._known_or_synthesized(request, requirements, count)
        else:
            count = request.count or cfg.generated_listing_count
            apartments, source = await self._model_listings(request, location, count, market)

        narrative = MARKET_ANALYSIS_UNAVAILABLE
        try:
            narrative = await self._complete(prompts.market_analysis_prompt(location, market), Profile.FULL, request)
        except MODEL_FAILURES as exc:
            self._degrade(request, exc, "Market analysis")

        stats = stats_from_apartments(apartments)
        recommendation = None
        advice = None
        if requirements is not None:
            try:
                content = await self._complete(
                    prompts.recommendation_prompt(apartments, requirements, requirements.description or location),
                    Profile.FULL,
                    request,
                )
                recommendation = parse_recommendation(content)
            except MODEL_FAILURES as exc:
                self._degrade(request, exc, "Recommendation")
            try:
                market_stats = stats_from_table(market) if market else stats
                advice = (
                    await self._complete(prompts.advice_prompt(requirements, market_stats), Profile.FAST, request)
                ).strip()
            except MODEL_FAILURES as exc:
                self._degrade(request, exc, "Personalised advice")

        return ListingsResult(
            location=location,
            listing_type=request.listing_type,
            apartments=apartments,
            market_analysis=narrative.strip(),
            recommendation=recommendation,
            advice=advice,
            stats=stats,
            generated_at=datetime.fromtimestamp(self._clock(), tz=timezone.utc).isoformat(),
            data_source=source,
        )

    async def _model_listings(
        self, request: ListingRequest, location: str, count: int, market: LocationMarketData | None
    ) -> tuple[list[Apartment], DataSource]:
        requirements = request.requirements
        criteria = None
        if requirements is not None:
            criteria = WebsiteCriteria(
                pet_friendly=requirements.pet_friendly,
                budget=BudgetCap(min=requirements.budget.min, max=requirements.budget.max),
                commute_time=requirements.commute_time,
            )
        prompt = prompts.location_listings_prompt(location, count, market, recommended_websites(criteria))
        try:
            content = await self._complete(prompt, Profile.FULL, request)
            return parse_apartments(content)[:count], DataSource.MODEL
        except MODEL_FAILURES as exc:
            self._degrade(request, exc, "Listing generation")
            return self._synthesize(request, location, count, requirements), DataSource.FALLBACK

    async def _neighborhood(self, request: NeighborhoodRequest) -> NeighborhoodResult:
        found = find_market_data(request.location)
        location = found[0] if found else request.location
        neighborhoods = list(found[1].neighborhoods) if found else []
        try:
            content = await self._complete(prompts.neighborhood_prompt(location), Profile.FULL, request)
            info = parse_neighborhood(content)
            source = DataSource.MODEL
        except MODEL_FAILURES as exc:
            self._degrade(request, exc, "Neighbourhood info")
            info = NeighborhoodInfo()
            source = DataSource.FALLBACK
        return NeighborhoodResult(location=location, neighborhoods=neighborhoods, info=info, data_source=source)
