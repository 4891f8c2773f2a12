from .cache import DictMemoizer, Memoizer
from .comparators import BinaryComparator, Comparator, Operator, UnaryComparator
from .errors import (
    ErrorCategory,
    RangeErrorKind,
    RangeParseError,
    SemverError,
    VersionErrorKind,
    VersionParseError,
)
from .ranges import RangeParser, VersionRange
from .version import ComponentState, ParseMode, Version, VersionParser, compare, parse, try_parse

__all__ = [
    "BinaryComparator",
    "Comparator",
    "ComponentState",
    "DictMemoizer",
    "ErrorCategory",
    "Memoizer",
    "Operator",
    "ParseMode",
    "RangeErrorKind",
    "RangeParseError",
    "RangeParser",
    "SemverError",
    "UnaryComparator",
    "Version",
    "VersionErrorKind",
    "VersionParseError",
    "VersionParser",
    "VersionRange",
    "compare",
    "parse",
    "try_parse",
]
