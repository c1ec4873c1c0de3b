"""Tests for Pydantic data models."""

import pytest
from pydantic import ValidationError

from rental_search.models import (
    NO_DATA,
    Apartment,
    DataSource,
    ListingRequest,
    ListingType,
    MarketAnalysisResult,
    MarketStats,
    NaturalLanguageResult,
    NeighborhoodInfo,
    Range,
    SearchIntent,
    SearchResponse,
    SearchType,
    UserRequirements,
)


def test_search_type_resolve():
    assert SearchType.resolve("qa") is SearchType.QUESTION_ANSWER
    assert SearchType.resolve(" Market_Analysis ") is SearchType.MARKET_ANALYSIS
    assert SearchType.resolve("comprehensive") is SearchType.COMPREHENSIVE_SEARCH
    assert SearchType.resolve("bogus") is SearchType.COMPREHENSIVE_SEARCH
    assert SearchType.resolve(None) is SearchType.COMPREHENSIVE_SEARCH


def test_range_rejects_inverted_bounds():
    with pytest.raises(ValidationError):
        Range(min=5, max=1)


def test_range_rejects_negative():
    with pytest.raises(ValidationError):
        Range(min=-1, max=10)


def test_user_requirements_defaults():
    req = UserRequirements()
    assert req.location == "San Francisco"
    assert req.budget == Range(min=2000, max=4000)
    assert req.area == Range(min=500, max=1500)
    assert req.commute_time == 30
    assert req.amenities == frozenset()


def test_user_requirements_frozen():
    req = UserRequirements()
    with pytest.raises(ValidationError):
        req.bedrooms = 3


def test_user_requirements_amenity_order_irrelevant():
    a = UserRequirements(amenities=["Gym", "Pool"])
    b = UserRequirements(amenities=["Pool", "Gym"])
    assert a == b


def test_search_intent_accepts_camel_case():
    intent = SearchIntent.model_validate(
        {"query": "2br", "searchType": "qa", "useRealData": False, "forceRealData": True}
    )
    assert intent.search_type is SearchType.QUESTION_ANSWER
    assert intent.use_real_data is False
    assert intent.force_real_data is True


def test_search_intent_defaults():
    intent = SearchIntent.model_validate({"query": None})
    assert intent.query == ""
    assert intent.search_type is SearchType.COMPREHENSIVE_SEARCH
    assert intent.use_real_data is True
    assert intent.force_real_data is False


def test_apartment_requires_positive_price():
    with pytest.raises(ValidationError):
        Apartment(id="a", title="t", location="l", price=0, bedrooms=1, bathrooms=1, area=500)


def test_apartment_rating_bounds():
    with pytest.raises(ValidationError):
        Apartment(id="a", title="t", location="l", price=1, bedrooms=1, bathrooms=1, area=500, rating=5.5)


def test_response_serializes_camel_case_and_hides_status():
    payload = NaturalLanguageResult(query="q", location="Seattle", data_source=DataSource.FALLBACK)
    response = SearchResponse(success=True, data=payload, search_type=SearchType.NATURAL_LANGUAGE, status_code=200)
    dumped = response.model_dump(by_alias=True, mode="json")
    assert "statusCode" not in dumped
    assert dumped["searchType"] == "natural_language"
    assert dumped["data"]["type"] == "natural_language_search"
    assert dumped["data"]["dataSource"] == "fallback"
    assert dumped["data"]["total"] == 0


def test_response_payload_discriminated_on_type():
    raw = {
        "success": True,
        "data": {
            "type": "market_analysis",
            "location": "Austin",
            "marketAnalysis": "Hot market",
            "stats": MarketStats(average_price=1800).model_dump(by_alias=True),
            "priceTier": "low",
            "activityLevel": "high",
            "dataSource": "openai_real_data",
        },
    }
    response = SearchResponse.model_validate(raw)
    assert isinstance(response.data, MarketAnalysisResult)
    assert response.data.total == 0


def test_listing_request_defaults():
    request = ListingRequest()
    assert request.location == "San Francisco"
    assert request.count is None
    assert request.listing_type is ListingType.GENERAL
    assert request.personalized is False


def test_listing_request_wire_spelling():
    request = ListingRequest.model_validate(
        {
            "location": "",
            "type": "Personalized",
            "count": "4",
            "requirements": {"location": "San Jose"},
            "forceRealData": True,
        }
    )
    assert request.location == "San Francisco"
    assert request.listing_type is ListingType.PERSONALIZED
    assert request.count == 4
    assert request.force_real_data is True
    assert request.personalized is True


def test_listing_request_personalized_needs_requirements():
    assert ListingRequest(listing_type="personalized").personalized is False
    assert ListingRequest(listing_type="anything").listing_type is ListingType.GENERAL


def test_listing_request_rejects_bad_count():
    with pytest.raises(ValidationError):
        ListingRequest(count=0)


def test_neighborhood_info_placeholders():
    info = NeighborhoodInfo(safety="Quiet streets")
    dumped = info.model_dump(by_alias=True)
    assert dumped["safety"] == "Quiet streets"
    assert dumped["costOfLiving"] == NO_DATA
