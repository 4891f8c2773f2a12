from __future__ import annotations

import pytest

from semver_ranges import (
    BinaryComparator,
    ErrorCategory,
    Operator,
    RangeErrorKind,
    RangeParseError,
    RangeParser,
    UnaryComparator,
    VersionErrorKind,
    VersionParseError,
    VersionRange,
)


def operators(text):
    return [[comparator.operator for comparator in comparators] for comparators in RangeParser(text).parse()]


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1.2.3", [[Operator.EQUAL]]),
        ("=1.2.3", [[Operator.EQUAL]]),
        ("<1.2.3", [[Operator.LESS_THAN]]),
        (">1.2.3", [[Operator.GREATER_THAN]]),
        ("<=1.2.3", [[Operator.LESS_OR_EQUAL]]),
        (">=1.2.3", [[Operator.GREATER_OR_EQUAL]]),
        ("^1.2.3", [[Operator.CARET]]),
        ("~1.2.3", [[Operator.TILDE]]),
        ("1.x", [[Operator.WILDCARD]]),
        ("*", [[Operator.WILDCARD]]),
        ("1.2.3 - 2.3.4", [[Operator.HYPHEN]]),
        ("1.2.3-2.3.4", [[Operator.EQUAL]]),
        (">=1.2.3 <2.0", [[Operator.GREATER_OR_EQUAL, Operator.LESS_THAN]]),
        ("1.2.3 || >=2.0", [[Operator.EQUAL], [Operator.GREATER_OR_EQUAL]]),
        ("1.2.3||2.0.0", [[Operator.EQUAL], [Operator.EQUAL]]),
        ("1.0 - 2.0 3.0", [[Operator.HYPHEN, Operator.EQUAL]]),
        ("  ^1.2.3   ~2.0  ", [[Operator.CARET, Operator.TILDE]]),
    ],
)
def test_operators(text, expected):
    assert operators(text) == expected


def test_unary_comparator_holds_reference_version():
    (comparator,), = RangeParser(">=v1.2.3-beta+build").parse()
    assert isinstance(comparator, UnaryComparator)
    assert str(comparator.version) == "1.2.3-beta+build"


def test_pre_release_literal_is_not_a_hyphen_range():
    (comparator,), = RangeParser("1.2.3-2.3.4").parse()
    assert isinstance(comparator, UnaryComparator)
    assert comparator.version.identifiers == ("2", "3", "4")


def test_hyphen_range_holds_both_versions():
    (comparator,), = RangeParser("1.2 -   2.3.4").parse()
    assert isinstance(comparator, BinaryComparator)
    assert str(comparator.left) == "1.2.0"
    assert str(comparator.right) == "2.3.4"


def test_tilde_allows_omitted_minor():
    (comparator,), = RangeParser("~1").parse()
    assert comparator.operator is Operator.TILDE
    assert comparator.version.trio == (1, 0, 0)


def test_only_tilde_allows_omitted_minor():
    with pytest.raises(RangeParseError) as exc:
        RangeParser("^1").parse()
    assert exc.value.kind is RangeErrorKind.INVALID_VERSION
    assert exc.value.inner.kind is VersionErrorKind.TRIO_ITEM_MISSING


def test_hyphen_upper_bound_needs_minor_unless_wildcard():
    with pytest.raises(RangeParseError) as exc:
        RangeParser("1.2.3 - 2").parse()
    assert exc.value.kind is RangeErrorKind.INVALID_VERSION
    assert exc.value.inner.kind is VersionErrorKind.TRIO_ITEM_MISSING

    (comparator,), = RangeParser("1.2.3 - 2.x").parse()
    assert isinstance(comparator, BinaryComparator)


@pytest.mark.parametrize(
    "text,kind,position",
    [
        ("", RangeErrorKind.NULL_STRING, None),
        ("   ", RangeErrorKind.NULL_STRING, None),
        ("||", RangeErrorKind.EMPTY_SET, 1),
        ("1.2.3 ||", RangeErrorKind.EMPTY_SET, 8),
        ("|| 1.2.3", RangeErrorKind.EMPTY_SET, 1),
        ("1.2.3 || || 2.0.0", RangeErrorKind.EMPTY_SET, 10),
        ("|", RangeErrorKind.INVALID_CHARACTER, 1),
        ("1.2.3 | 2.0.0", RangeErrorKind.INVALID_CHARACTER, 7),
        (">=", RangeErrorKind.ORPHANED_OPERATOR, 2),
        (">", RangeErrorKind.ORPHANED_OPERATOR, 1),
        ("< 1.0", RangeErrorKind.ORPHANED_OPERATOR, 1),
        ("~ 1.0", RangeErrorKind.ORPHANED_OPERATOR, 1),
        ("^", RangeErrorKind.ORPHANED_OPERATOR, 1),
        ("1.2.3 -", RangeErrorKind.ORPHANED_OPERATOR, 7),
        ("1.2.3 - ", RangeErrorKind.ORPHANED_OPERATOR, 8),
    ],
)
def test_malformed_ranges(text, kind, position):
    with pytest.raises(RangeParseError) as exc:
        VersionRange.parse(text)
    assert exc.value.kind is kind
    assert exc.value.position == position
    assert exc.value.inner is None

    assert VersionRange.try_parse(text) == (False, None)


@pytest.mark.parametrize(
    "text,inner,position",
    [
        ("^1.2.3 >=abc", VersionErrorKind.PRE_TRIO_INVALID_CHAR, 9),
        ("1.2.3.4", VersionErrorKind.TRIO_INVALID_CHAR, 0),
        ("x.2", VersionErrorKind.TRIO_ITEM_UNEXPECTED, 0),
        ("01.2.3", VersionErrorKind.TRIO_ITEM_LEADING_ZERO, 0),
        (">=1.2.99999999999", VersionErrorKind.TRIO_ITEM_OVERFLOW, 2),
        ("=<1.0", VersionErrorKind.PRE_TRIO_INVALID_CHAR, 1),
        ("1.0.0 - 2.x.3", VersionErrorKind.TRIO_ITEM_UNEXPECTED, 8),
    ],
)
def test_invalid_version_preserves_inner_error(text, inner, position):
    with pytest.raises(RangeParseError) as exc:
        VersionRange.parse(text)

    error = exc.value
    assert error.kind is RangeErrorKind.INVALID_VERSION
    assert error.position == position
    assert isinstance(error.inner, VersionParseError)
    assert error.inner.kind is inner
    assert error.__cause__ is error.inner
    assert inner.value in str(error)
    assert error.category is inner.category


def test_range_error_categories():
    with pytest.raises(RangeParseError) as exc:
        VersionRange.parse("")
    assert exc.value.category is ErrorCategory.INPUT_ABSENCE

    with pytest.raises(RangeParseError) as exc:
        VersionRange.parse("||")
    assert exc.value.category is ErrorCategory.GRAMMAR


@pytest.mark.parametrize(
    "text,rendered",
    [
        ("1.2.3", "1.2.3"),
        ("=1.2.3", "1.2.3"),
        (">=v1.2.3  <2.0", ">=1.2.3 <2.0"),
        ("^1.2.3-beta+build", "^1.2.3-beta+build"),
        ("~1", "~1"),
        ("1.X || *", "1.x.x || x.x.x"),
        ("1.2 -2.0.0", "1.2 - 2.0.0"),
    ],
)
def test_str_renders_range_syntax(text, rendered):
    assert str(VersionRange.parse(text)) == rendered


def test_repr():
    assert repr(VersionRange.parse("^1.2.3")) == "VersionRange('^1.2.3')"


def test_range_requires_non_empty_sets():
    with pytest.raises(ValueError):
        VersionRange([])
    with pytest.raises(ValueError):
        VersionRange([[]])
