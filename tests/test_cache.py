from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from semver_ranges import DictMemoizer, ParseMode, Version, VersionParser, VersionRange, parse


def test_dict_memoizer():
    cache = DictMemoizer()
    assert cache.try_get("a") is None
    cache.insert("a", 1)
    assert cache.try_get("a") == 1
    assert "a" in cache
    assert len(cache) == 1


def test_parser_memoizes_by_text_and_mode():
    cache = DictMemoizer()
    parser = VersionParser(cache)

    first = parser.parse("1.2.3")
    assert parser.parse(" 1.2.3 ") is first
    assert ("1.2.3", ParseMode.STRICT) in cache

    lenient = parser.parse("1.2", ParseMode.OPTIONAL_PATCH)
    assert ("1.2", ParseMode.OPTIONAL_PATCH) in cache
    assert parser.parse("1.2", ParseMode.OPTIONAL_PATCH) is lenient
    assert len(cache) == 2


def test_parser_returns_stored_value(caplog):
    cache = DictMemoizer()
    cache.insert(("9.9.9", ParseMode.STRICT), Version(1))
    parser = VersionParser(cache)

    caplog.set_level(logging.DEBUG, logger="semver_ranges.version")
    assert parser.parse("9.9.9") == Version(1)
    assert "cache hit" in caplog.text


def test_failed_parses_are_not_memoized():
    cache = DictMemoizer()
    parser = VersionParser(cache)

    ok, version = parser.try_parse("1.2")
    assert not ok and version is None
    assert len(cache) == 0


def test_range_literals_bypass_parser_cache():
    cache = DictMemoizer()
    parser = VersionParser(cache)
    mode = ParseMode.OPTIONAL_PATCH | ParseMode.ALLOW_WILDCARD

    parser.parse_literal("1.x", mode)
    assert len(cache) == 0


def test_range_memoizes_results():
    cache = DictMemoizer()
    version_range = VersionRange.parse("^1.2.3", cache)

    assert version_range.satisfied_by(parse("1.4.0"))
    assert not version_range.satisfied_by(parse("2.0.0"))
    assert cache.try_get(parse("1.4.0")) is True
    assert cache.try_get(parse("2.0.0")) is False


def test_range_consults_cache_first():
    cache = DictMemoizer()
    cache.insert(Version(5), True)
    cache.insert(Version(1, 5), False)
    version_range = VersionRange.parse("^1.2.3", cache)

    assert version_range.satisfied_by(Version(5))
    assert not version_range.satisfied_by(Version(1, 5))


def test_range_without_cache():
    version_range = VersionRange.parse("^1.2.3")
    assert version_range.cache is None
    assert version_range.satisfied_by(parse("1.4.0"))


def test_shared_cache_across_threads():
    cache = DictMemoizer()
    version_range = VersionRange.parse(">=1.0.0 <2.0.0 || ^3.1", cache)
    versions = [Version(major, minor, patch) for major in range(4) for minor in range(5) for patch in range(5)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(version_range.satisfied_by, versions * 4))

    expected = [version_range.satisfied_by(version) for version in versions] * 4
    assert results == expected
    assert len(cache) == len(versions)
    assert cache.try_get(Version(3, 2)) is True
    assert cache.try_get(Version(2, 4, 4)) is False
