"""Recover structured data from free-text model replies."""

import json
import logging
import math
import re
from typing import Any, Literal

from pydantic import ValidationError as PydanticValidationError

from rental_search.errors import ParseError
from rental_search.models import Apartment, Contact, NeighborhoodInfo, Recommendation, UserRequirements, UserReviews

logger = logging.getLogger(__name__)

Shape = Literal["object", "array"]

_OPENERS: dict[str, str] = {"object": "{", "array": "["}
_CLOSERS: dict[str, str] = {"{": "}", "[": "]"}
_NUMBER_RE = re.compile(r"-?\d[\d,]*(?:\.\d+)?")


def _scan_to_close(text: str, start: int) -> int | None:
    """Return the index closing the bracket at ``start``, or None.

    Tracks nesting depth and skips over JSON string literals (with escapes),
    so brackets inside strings do not count. Mismatched closers abort.
    """
    expected: list[str] = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _CLOSERS:
            expected.append(_CLOSERS[ch])
        elif ch in "}]":
            if not expected or ch != expected.pop():
                return None
            if not expected:
                return i
    return None


def _balanced_spans(text: str, opener: str):
    """Yield top-level balanced spans that begin with ``opener``, left to right."""
    start = text.find(opener)
    while start != -1:
        end = _scan_to_close(text, start)
        if end is None:
            start = text.find(opener, start + 1)
            continue
        yield text[start : end + 1]
        start = text.find(opener, end + 1)


def extract_structured(raw_text: str, shape: Shape) -> Any:
    """Find the JSON object or array embedded in a model reply.

    Balanced spans of the requested shape are tried in order; the first one
    that decodes to the right type wins. If none does, the whole reply is
    decoded as JSON. Raises ParseError when both fail.
    """
    expected_type = dict if shape == "object" else list
    for span in _balanced_spans(raw_text, _OPENERS[shape]):
        try:
            value = json.loads(span)
        except ValueError:
            continue
        if isinstance(value, expected_type):
            return value

    try:
        value = json.loads(raw_text)
    except ValueError as exc:
        raise ParseError(f"No JSON {shape} found in model reply") from exc
    if not isinstance(value, expected_type):
        raise ParseError(f"Model reply is JSON but not an {shape}")
    return value


def parse_id_list(raw_text: str) -> list[str]:
    """Split a comma-separated id reply such as ``apt-001, apt-002``."""
    ids = []
    for token in re.split(r"[,\n]", raw_text):
        cleaned = token.strip().strip("\"'`[]. ")
        if cleaned:
            ids.append(cleaned)
    return ids


# --- Field coercion ---


def _to_number(value: Any) -> float | None:
    """Coerce to a finite float; NaN, infinities and overflow count as missing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = _NUMBER_RE.search(value)
        if not match:
            return None
        value = float(match.group().replace(",", ""))
    if isinstance(value, int):
        try:
            value = float(value)
        except OverflowError:
            return None
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    return None


def _to_int(value: Any, default: int, minimum: int = 0) -> int:
    number = _to_number(value)
    if number is None or number < minimum:
        return default
    return int(number)


def _to_float(value: Any, default: float) -> float:
    number = _to_number(value)
    return default if number is None else number


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "y")
    return bool(value)


def _to_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(item) for item in value if item not in (None, "")]
    return []


def _default_description(title: str, location: str, bedrooms: int, bathrooms: int, area: int, amenities: list[str]) -> str:
    size = "spacious" if area >= 1000 else "comfortable" if area >= 800 else "compact"
    amenity_text = f"with {', '.join(amenities[:3])}" if amenities else "fully equipped"
    audience = "families" if bedrooms >= 2 else "young professionals"
    return (
        f"{title} in {location}: a {size} {bedrooms}-bed, {bathrooms}-bath home {amenity_text}. "
        f"Convenient transit and everyday amenities nearby, ideal for {audience}."
    )


def normalize_apartment(data: dict, fallback_id: str) -> Apartment:
    """Build an Apartment from an untrusted record.

    Every numeric field gets a default when missing or not numeric, so no
    listing surfaces without a price, bedroom or bathroom count.
    """
    title = str(data.get("title") or data.get("name") or "Apartment")
    location = str(data.get("location") or data.get("address") or "Unknown location")
    bedrooms = _to_int(data.get("bedrooms"), 1)
    bathrooms = _to_int(data.get("bathrooms"), 1)
    area = _to_int(data.get("area"), 800, minimum=1)
    amenities = _to_str_list(data.get("amenities"))

    contact_raw = data.get("contact") if isinstance(data.get("contact"), dict) else {}
    contact = Contact(
        phone=str(contact_raw.get("phone") or Contact().phone),
        email=str(contact_raw.get("email") or Contact().email),
    )

    reviews_raw = data.get("userReviews") or data.get("user_reviews")
    user_reviews = None
    if isinstance(reviews_raw, dict):
        user_reviews = UserReviews(
            pros=_to_str_list(reviews_raw.get("pros")),
            cons=_to_str_list(reviews_raw.get("cons")),
        )

    website = data.get("website")
    if not (isinstance(website, str) and website.startswith("http")):
        website = None

    return Apartment(
        id=str(data.get("id") or fallback_id),
        title=title,
        location=location,
        price=_to_int(data.get("price"), 2500, minimum=1),
        bedrooms=bedrooms,
        bathrooms=bathrooms,
        area=area,
        description=str(data.get("description") or "")
        or _default_description(title, location, bedrooms, bathrooms, area, amenities),
        amenities=amenities,
        rating=min(max(_to_float(data.get("rating"), 4.0), 0.0), 5.0),
        distance=max(_to_float(data.get("distance"), 1.0), 0.0),
        commute_time=_to_int(data.get("commuteTime", data.get("commute_time")), 30),
        pet_friendly=_to_bool(data.get("petFriendly", data.get("pet_friendly"))),
        furnished=_to_bool(data.get("furnished")),
        parking=_to_bool(data.get("parking")),
        contact=contact,
        available_date=str(data.get("availableDate") or data.get("available_date") or "Available now"),
        highlights=_to_str_list(data.get("highlights")),
        promotions=str(data["promotions"]) if data.get("promotions") else None,
        user_reviews=user_reviews,
        website=website,
    )


def parse_apartments(raw_text: str, id_prefix: str = "apt") -> list[Apartment]:
    """Parse a model reply holding a JSON array of listings.

    Non-object entries are skipped and duplicate ids are replaced so ids stay
    unique within the batch. Raises ParseError if no usable record remains.
    """
    items = extract_structured(raw_text, "array")
    apartments: list[Apartment] = []
    seen: set[str] = set()
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            logger.debug("Skipping non-object listing entry: %r", item)
            continue
        apartment = normalize_apartment(item, f"{id_prefix}-{index:03d}")
        if apartment.id in seen:
            n = index
            while f"{id_prefix}-{n:03d}" in seen:
                n += 1
            apartment = apartment.model_copy(update={"id": f"{id_prefix}-{n:03d}"})
        seen.add(apartment.id)
        apartments.append(apartment)

    if not apartments:
        raise ParseError("Model reply contained no usable listings")
    return apartments


def parse_requirements(raw_text: str, default_location: str) -> UserRequirements:
    data = extract_structured(raw_text, "object")
    cleaned = {key: value for key, value in data.items() if value is not None}
    if not cleaned.get("location"):
        cleaned["location"] = default_location
    try:
        return UserRequirements.model_validate(cleaned)
    except PydanticValidationError as exc:
        raise ParseError(f"Model requirements failed validation: {exc.error_count()} errors") from exc


def parse_recommendation(raw_text: str) -> Recommendation:
    data = extract_structured(raw_text, "object")
    try:
        return Recommendation.model_validate(data)
    except PydanticValidationError as exc:
        raise ParseError(f"Model recommendation failed validation: {exc.error_count()} errors") from exc


def _to_text(value: Any) -> str:
    """Flatten a loosely structured reply value to one line of text."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return "; ".join(text for text in map(_to_text, value) if text)
    if isinstance(value, dict):
        parts = []
        for key, item in value.items():
            text = _to_text(item)
            if text:
                parts.append(f"{key}: {text}")
        return "; ".join(parts)
    if value is None or isinstance(value, bool):
        return ""
    return str(value)


def parse_neighborhood(raw_text: str) -> NeighborhoodInfo:
    """Read a neighbourhood description object.

    Nested values are flattened to text; aspects the reply leaves out keep
    the NO_DATA placeholder.
    """
    data = extract_structured(raw_text, "object")
    fields = {}
    for key, value in data.items():
        text = _to_text(value)
        if text:
            fields[key] = text
    return NeighborhoodInfo.model_validate(fields)
