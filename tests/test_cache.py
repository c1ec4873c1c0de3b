"""Tests for the request cache."""

import time
from unittest.mock import patch

from rental_search.cache import RequestCache
from rental_search.models import SearchType


def test_put_and_get():
    cache = RequestCache(default_max_age=60)
    cache.put("key1", "value1", SearchType.NATURAL_LANGUAGE)
    assert cache.get("key1") == "value1"


def test_get_missing_key():
    cache = RequestCache()
    assert cache.get("nonexistent") is None


def test_stale_entry_is_a_miss_but_stays_resident():
    cache = RequestCache(default_max_age=120)
    cache.put("key1", "value1", SearchType.MARKET_ANALYSIS)

    with patch("rental_search.cache.time") as mock_time:
        mock_time.time.return_value = time.time() + 121
        assert cache.get("key1") is None

    assert "key1" in cache
    assert len(cache) == 1


def test_qa_entries_live_longer():
    cache = RequestCache(default_max_age=120, max_ages={SearchType.QUESTION_ANSWER: 1800})
    cache.put("qa", "answer", SearchType.QUESTION_ANSWER)
    cache.put("nl", "listings", SearchType.NATURAL_LANGUAGE)

    with patch("rental_search.cache.time") as mock_time:
        mock_time.time.return_value = time.time() + 600
        assert cache.get("qa") == "answer"
        assert cache.get("nl") is None


def test_bypass_type_always_misses():
    cache = RequestCache(bypass=(SearchType.COMPREHENSIVE_SEARCH,))
    cache.put("key1", "value1", SearchType.COMPREHENSIVE_SEARCH)
    assert cache.get("key1") is None
    assert "key1" in cache


def test_overwrite_existing_key():
    cache = RequestCache()
    cache.put("key1", "value1")
    cache.put("key1", "value2")
    assert cache.get("key1") == "value2"
    assert len(cache) == 1


def test_max_age_for_untyped_entry_uses_default():
    cache = RequestCache(default_max_age=42, max_ages={SearchType.QUESTION_ANSWER: 1800})
    assert cache.max_age_for(None) == 42
    assert cache.max_age_for(SearchType.MARKET_ANALYSIS) == 42
    assert cache.max_age_for(SearchType.QUESTION_ANSWER) == 1800


def test_clear():
    cache = RequestCache()
    cache.put("a", 1)
    cache.put("b", 2)
    cache.clear()
    assert cache.get("a") is None
    assert len(cache) == 0
