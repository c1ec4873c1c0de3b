"""Tests for recovering structured data from model replies."""

import json

import pytest

from rental_search.errors import ParseError
from rental_search.llm.parsers import (
    extract_structured,
    normalize_apartment,
    parse_apartments,
    parse_id_list,
    parse_neighborhood,
    parse_recommendation,
    parse_requirements,
)
from rental_search.models import NO_DATA


# --- extract_structured ---


def test_extract_object_from_prose():
    raw = 'Here is the analysis:\n{"location": "San Jose", "bedrooms": 2}\nHope this helps!'
    assert extract_structured(raw, "object") == {"location": "San Jose", "bedrooms": 2}


def test_extract_array_from_code_fence():
    raw = '```json\n[{"id": "a"}, {"id": "b"}]\n```'
    assert extract_structured(raw, "array") == [{"id": "a"}, {"id": "b"}]


def test_extract_ignores_brackets_inside_strings():
    raw = 'Result: {"description": "close to {downtown} and ]parks[", "price": 3000} done'
    value = extract_structured(raw, "object")
    assert value["description"] == "close to {downtown} and ]parks["
    assert value["price"] == 3000


def test_extract_handles_escaped_quotes():
    raw = 'x {"title": "The \\"Loft\\"", "n": 1} y'
    assert extract_structured(raw, "object") == {"title": 'The "Loft"', "n": 1}


def test_extract_skips_undecodable_span():
    raw = "{not json} and then {\"ok\": true}"
    assert extract_structured(raw, "object") == {"ok": True}


def test_extract_nested_returns_outermost():
    raw = 'prefix {"a": {"b": [1, 2, {"c": 3}]}} suffix {"second": 1}'
    assert extract_structured(raw, "object") == {"a": {"b": [1, 2, {"c": 3}]}}


def test_extract_array_surrounded_by_text():
    assert extract_structured('here is your data: [{"a":1}] thanks', "array") == [{"a": 1}]


def test_extract_whole_text_fallback():
    assert extract_structured("  []  ", "array") == []


@pytest.mark.parametrize(
    "raw, shape",
    [
        ("no json here", "object"),
        ("", "array"),
        ('"just a string"', "object"),
        ('{"an": "object"}', "array"),
        ('{"unterminated": [1, 2}', "object"),
    ],
)
def test_extract_failures_raise_parse_error(raw, shape):
    with pytest.raises(ParseError):
        extract_structured(raw, shape)


# --- parse_id_list ---


def test_parse_id_list():
    assert parse_id_list("real-001, real-004,real-007.") == ["real-001", "real-004", "real-007"]


def test_parse_id_list_tolerates_quotes_and_newlines():
    assert parse_id_list('"real-002"\n`real-003`') == ["real-002", "real-003"]


def test_parse_id_list_empty_reply():
    assert parse_id_list("   ") == []


# --- normalize_apartment ---


def test_normalize_full_record():
    apt = normalize_apartment(
        {
            "id": "x-1",
            "title": "Sunny Loft",
            "location": "SOMA, San Francisco",
            "price": 3200,
            "bedrooms": 2,
            "bathrooms": 1,
            "area": 950,
            "amenities": ["Gym", "Pool"],
            "rating": 4.6,
            "petFriendly": True,
            "commuteTime": 18,
            "contact": {"phone": "(415) 555-0100", "email": "leasing@loft.com"},
            "userReviews": {"pros": ["Light"], "cons": ["Noise"]},
            "website": "https://example.com/loft",
        },
        "fallback-id",
    )
    assert apt.id == "x-1"
    assert apt.price == 3200
    assert apt.pet_friendly is True
    assert apt.commute_time == 18
    assert apt.contact.email == "leasing@loft.com"
    assert apt.user_reviews.cons == ["Noise"]
    assert apt.website == "https://example.com/loft"


def test_normalize_defaults_for_missing_and_mistyped_numbers():
    apt = normalize_apartment(
        {"title": "Mystery", "price": "call us", "bedrooms": None, "bathrooms": "two", "rating": "great"},
        "apt-009",
    )
    assert apt.id == "apt-009"
    assert apt.price == 2500
    assert apt.bedrooms == 1
    assert apt.bathrooms == 1
    assert apt.area == 800
    assert apt.rating == 4.0
    assert apt.distance == 1.0
    assert apt.commute_time == 30
    assert apt.contact.phone == "N/A"
    assert apt.description


def test_normalize_reads_numbers_from_strings():
    apt = normalize_apartment({"price": "$3,450/month", "area": "1,100 sq ft"}, "a")
    assert apt.price == 3450
    assert apt.area == 1100


def test_normalize_clamps_rating():
    assert normalize_apartment({"rating": 9}, "a").rating == 5.0
    assert normalize_apartment({"rating": -2}, "a").rating == 0.0


def test_normalize_drops_non_http_website():
    assert normalize_apartment({"website": "www.example.com"}, "a").website is None


def test_normalize_accepts_snake_case_keys():
    apt = normalize_apartment({"pet_friendly": "yes", "commute_time": 12, "available_date": "May 1"}, "a")
    assert apt.pet_friendly is True
    assert apt.commute_time == 12
    assert apt.available_date == "May 1"


# --- parse_apartments ---


def test_parse_apartments_skips_junk_and_dedupes_ids():
    payload = [
        {"id": "dup", "title": "One", "price": 3000},
        "not a record",
        {"id": "dup", "title": "Two", "price": 3100},
        {"title": "Three"},
    ]
    raw = "Listings:\n" + json.dumps(payload)
    apartments = parse_apartments(raw)
    assert [a.title for a in apartments] == ["One", "Two", "Three"]
    ids = [a.id for a in apartments]
    assert len(set(ids)) == 3
    assert ids[0] == "dup"


def test_parse_apartments_generated_id_does_not_collide_with_explicit_id():
    raw = '[{"id": "apt-002", "title": "A", "price": 1000}, {"title": "B", "price": 1200}, {"id": "apt-003"}]'
    ids = [a.id for a in parse_apartments(raw)]
    assert ids[:2] == ["apt-002", "apt-003"]
    assert len(set(ids)) == 3


def test_parse_apartments_non_finite_numbers_take_defaults():
    raw = '[{"id": "apt-001", "title": "X", "price": Infinity, "bedrooms": 1e400, "area": -Infinity, "rating": NaN}]'
    (apt,) = parse_apartments(raw)
    assert apt.price == 2500
    assert apt.bedrooms == 1
    assert apt.area == 800
    assert apt.rating == 4.0


def test_normalize_overflowing_numbers_take_defaults():
    apt = normalize_apartment({"price": "9" * 400, "bathrooms": 10**400}, "a")
    assert apt.price == 2500
    assert apt.bathrooms == 1


def test_parse_apartments_no_usable_records():
    with pytest.raises(ParseError):
        parse_apartments('["a", 1, null]')


def test_parse_apartments_requires_array():
    with pytest.raises(ParseError):
        parse_apartments('{"apartments": "none"}')


# --- parse_requirements / parse_recommendation ---


def test_parse_requirements_camel_case_reply():
    raw = json.dumps(
        {
            "location": "San Jose",
            "budget": {"min": 2500, "max": 3500},
            "bedrooms": 2,
            "bathrooms": 2,
            "amenities": ["Gym", "Gym", "Parking"],
            "commuteTime": 20,
            "petFriendly": True,
            "description": None,
        }
    )
    req = parse_requirements(raw, "San Francisco")
    assert req.location == "San Jose"
    assert req.budget.max == 3500
    assert req.bedrooms == 2
    assert req.amenities == frozenset({"Gym", "Parking"})
    assert req.commute_time == 20
    assert req.pet_friendly is True
    assert req.description == ""


def test_parse_requirements_defaults_location():
    req = parse_requirements('{"bedrooms": 1, "location": ""}', "Seattle")
    assert req.location == "Seattle"
    assert req.budget.min == 2000


def test_parse_requirements_invalid_range():
    with pytest.raises(ParseError):
        parse_requirements('{"budget": {"min": 5000, "max": 1000}}', "Austin")


def test_parse_recommendation():
    raw = 'Sure! {"reasoning": "Good value", "recommendations": ["Tour real-003"], "tips": ["Apply early"]}'
    rec = parse_recommendation(raw)
    assert rec.reasoning == "Good value"
    assert rec.recommendations == ["Tour real-003"]
    assert rec.market_insights == []


def test_parse_recommendation_not_json():
    with pytest.raises(ParseError):
        parse_recommendation("I recommend the second one.")


def test_parse_neighborhood_flattens_nested_values():
    raw = """Here is the overview:
{"convenience": "Groceries on every block",
 "transportation": {"transit": "BART and Muni", "parking": "Scarce"},
 "education": ["UCSF", "SF State"],
 "safety": "",
 "costOfLiving": 9}"""
    info = parse_neighborhood(raw)
    assert info.convenience == "Groceries on every block"
    assert info.transportation == "transit: BART and Muni; parking: Scarce"
    assert info.education == "UCSF; SF State"
    assert info.safety == NO_DATA
    assert info.entertainment == NO_DATA
    assert info.cost_of_living == "9"


def test_parse_neighborhood_not_json():
    with pytest.raises(ParseError):
        parse_neighborhood("It is a lovely place to live.")
