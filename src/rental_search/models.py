"""Pydantic data models for rental search requests, listings and results."""

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, computed_field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_LOCATION = "San Francisco"


class WireModel(BaseModel):
    """Base for everything exchanged with clients: camelCase on the wire,
    snake_case in Python. Either spelling is accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchType(str, Enum):
    NATURAL_LANGUAGE = "natural_language"
    REQUIREMENTS_ANALYSIS = "requirements_analysis"
    SMART_RECOMMENDATION = "smart_recommendation"
    MARKET_ANALYSIS = "market_analysis"
    QUESTION_ANSWER = "qa"
    COMPREHENSIVE_SEARCH = "comprehensive_search"

    @classmethod
    def resolve(cls, raw: "str | SearchType | None") -> "SearchType":
        """Map a client-supplied search type to a member.

        Missing and unrecognised values (including the short ``comprehensive``
        spelling used by GET requests) resolve to COMPREHENSIVE_SEARCH.
        """
        if isinstance(raw, cls):
            return raw
        if raw:
            normalized = str(raw).strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return cls.COMPREHENSIVE_SEARCH


class ListingType(str, Enum):
    GENERAL = "general"
    PERSONALIZED = "personalized"

    @classmethod
    def resolve(cls, raw: "str | ListingType | None") -> "ListingType":
        """Only an explicit ``personalized`` selects personalized listings."""
        if isinstance(raw, cls):
            return raw
        if raw and str(raw).strip().lower() == cls.PERSONALIZED.value:
            return cls.PERSONALIZED
        return cls.GENERAL


class DataSource(str, Enum):
    MODEL = "openai_real_data"
    MODEL_DIRECT = "openai_direct"
    STATIC_TABLE = "static_table"
    FALLBACK = "fallback"


class Range(WireModel):
    """Inclusive numeric range; both bounds non-negative and min <= max."""

    model_config = ConfigDict(frozen=True)

    min: int = Field(0, ge=0)
    max: int = Field(0, ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> "Range":
        if self.min > self.max:
            raise ValueError(f"range min {self.min} exceeds max {self.max}")
        return self


class UserRequirements(WireModel):
    """What the renter is looking for. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    location: str = DEFAULT_LOCATION
    budget: Range = Field(default_factory=lambda: Range(min=2000, max=4000))
    bedrooms: int = Field(1, ge=0)
    bathrooms: int = Field(1, ge=0)
    area: Range = Field(default_factory=lambda: Range(min=500, max=1500))
    amenities: frozenset[str] = frozenset()
    commute_time: int = Field(30, ge=0)
    pet_friendly: bool = False
    furnished: bool = False
    parking: bool = False
    description: str = ""


class Contact(WireModel):
    phone: str = "N/A"
    email: str = "contact@realestate.com"


class UserReviews(WireModel):
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class Apartment(WireModel):
    """A single rental listing, created fresh for each request."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    location: str
    price: int = Field(gt=0)
    bedrooms: int = Field(ge=0)
    bathrooms: int = Field(ge=0)
    area: int = Field(ge=0)
    description: str = ""
    amenities: list[str] = Field(default_factory=list)
    rating: float = Field(4.0, ge=0.0, le=5.0)
    distance: float = 1.0
    commute_time: int = 30
    pet_friendly: bool = False
    furnished: bool = False
    parking: bool = False
    contact: Contact = Field(default_factory=Contact)
    available_date: str = "Available now"
    highlights: list[str] = Field(default_factory=list)
    promotions: Optional[str] = None
    user_reviews: Optional[UserReviews] = None
    website: Optional[str] = None


class MarketStats(WireModel):
    """Price statistics for a location or a batch of listings."""

    average_price: int = 0
    price_range: Range = Field(default_factory=Range)
    sample_size: int = 0


class Recommendation(WireModel):
    reasoning: str = ""
    recommendations: list[str] = Field(default_factory=list)
    market_insights: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)


class RequirementsAnalysis(WireModel):
    original_input: str
    extracted_requirements: UserRequirements


NO_DATA = "No data available"


class NeighborhoodInfo(WireModel):
    """Living conditions for a location; unknown aspects read NO_DATA."""

    convenience: str = NO_DATA
    transportation: str = NO_DATA
    education: str = NO_DATA
    entertainment: str = NO_DATA
    safety: str = NO_DATA
    cost_of_living: str = NO_DATA


class SearchIntent(WireModel):
    """A classified client query as received by the dispatcher."""

    query: str = ""
    search_type: SearchType = SearchType.COMPREHENSIVE_SEARCH
    user_preferences: Optional[UserRequirements] = None
    model: Optional[str] = None
    use_real_data: bool = True
    force_real_data: bool = False

    @field_validator("query", mode="before")
    @classmethod
    def _none_query_is_empty(cls, value):
        return "" if value is None else value

    @field_validator("search_type", mode="before")
    @classmethod
    def _resolve_search_type(cls, value):
        return SearchType.resolve(value)


def _location_or_default(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_LOCATION
    return value


Location = Annotated[str, BeforeValidator(_location_or_default)]


class ListingRequest(WireModel):
    """Listings for a location, optionally narrowed by requirements.

    ``count`` left unset means 10 general or 8 personalized listings.
    Personalized listings need ``requirements``; without them the request
    is served as general.
    """

    location: Location = DEFAULT_LOCATION
    count: Optional[int] = Field(None, ge=1, le=50)
    requirements: Optional[UserRequirements] = None
    listing_type: ListingType = Field(ListingType.GENERAL, alias="type")
    model: Optional[str] = None
    force_real_data: bool = False

    @field_validator("listing_type", mode="before")
    @classmethod
    def _resolve_listing_type(cls, value):
        return ListingType.resolve(value)

    @property
    def personalized(self) -> bool:
        return self.listing_type is ListingType.PERSONALIZED and self.requirements is not None


class NeighborhoodRequest(WireModel):
    location: Location = DEFAULT_LOCATION
    model: Optional[str] = None
    force_real_data: bool = False


# --- Result payloads: one per search type, plus generated listings and neighbourhood info ---


class NaturalLanguageResult(WireModel):
    type: Literal["natural_language_search"] = "natural_language_search"
    query: str
    location: str
    apartments: list[Apartment] = Field(default_factory=list)
    data_source: DataSource

    @computed_field
    @property
    def total(self) -> int:
        return len(self.apartments)


class RequirementsAnalysisResult(WireModel):
    type: Literal["requirements_analysis"] = "requirements_analysis"
    requirements: UserRequirements
    apartments: list[Apartment] = Field(default_factory=list)
    analysis: RequirementsAnalysis
    data_source: DataSource

    @computed_field
    @property
    def total(self) -> int:
        return len(self.apartments)


class SmartRecommendationResult(WireModel):
    type: Literal["smart_recommendation"] = "smart_recommendation"
    requirements: UserRequirements
    apartments: list[Apartment] = Field(default_factory=list)
    recommendation: Optional[Recommendation] = None
    data_source: DataSource

    @computed_field
    @property
    def total(self) -> int:
        return len(self.apartments)


class MarketAnalysisResult(WireModel):
    type: Literal["market_analysis"] = "market_analysis"
    location: str
    apartments: list[Apartment] = Field(default_factory=list)
    market_analysis: str
    stats: MarketStats
    price_tier: str
    activity_level: str
    data_source: DataSource

    @computed_field
    @property
    def total(self) -> int:
        return len(self.apartments)


class QuestionAnswerResult(WireModel):
    type: Literal["qa"] = "qa"
    question: str
    answer: str
    context_apartments: list[Apartment] = Field(default_factory=list)
    data_source: DataSource


class ComprehensiveSearchResult(WireModel):
    type: Literal["comprehensive_search"] = "comprehensive_search"
    query: str
    location: str
    requirements: UserRequirements
    apartments: list[Apartment] = Field(default_factory=list)
    market_analysis: str
    stats: MarketStats
    data_source: DataSource

    @computed_field
    @property
    def total(self) -> int:
        return len(self.apartments)


class ListingsResult(WireModel):
    type: Literal["generated_listings"] = "generated_listings"
    location: str
    listing_type: ListingType
    apartments: list[Apartment] = Field(default_factory=list)
    market_analysis: str
    recommendation: Optional[Recommendation] = None
    advice: Optional[str] = None
    stats: MarketStats
    generated_at: str
    data_source: DataSource

    @computed_field
    @property
    def total(self) -> int:
        return len(self.apartments)


class NeighborhoodResult(WireModel):
    type: Literal["neighborhood_info"] = "neighborhood_info"
    location: str
    neighborhoods: list[str] = Field(default_factory=list)
    info: NeighborhoodInfo
    data_source: DataSource


SearchPayload = Annotated[
    Union[
        NaturalLanguageResult,
        RequirementsAnalysisResult,
        SmartRecommendationResult,
        MarketAnalysisResult,
        QuestionAnswerResult,
        ComprehensiveSearchResult,
        ListingsResult,
        NeighborhoodResult,
    ],
    Field(discriminator="type"),
]


class SearchResponse(WireModel):
    """Uniform envelope returned at the system boundary."""

    success: bool
    data: Optional[SearchPayload] = None
    query: Optional[str] = None
    search_type: Optional[SearchType] = None
    message: str = ""
    error: Optional[str] = None
    status_code: int = Field(200, exclude=True)


# --- Website directory ---


class Website(WireModel):
    name: str
    url: str
    description: str
    features: list[str] = Field(default_factory=list)


class RecommendedWebsite(WireModel):
    name: str
    url: str
    reason: str


class BudgetCap(WireModel):
    min: int = 0
    max: Optional[int] = None


class WebsiteCriteria(WireModel):
    """Optional hints that steer which listing sites get recommended."""

    pet_friendly: bool = False
    budget: Optional[BudgetCap] = None
    commute_time: Optional[int] = None


class WebsiteDirectory(WireModel):
    location: str
    all_websites: list[Website] = Field(default_factory=list)
    recommended_websites: list[RecommendedWebsite] = Field(default_factory=list)

    @computed_field
    @property
    def total_websites(self) -> int:
        return len(self.all_websites)
