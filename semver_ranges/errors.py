from enum import Enum


class ErrorCategory(Enum):
    INPUT_ABSENCE = "input-absence"
    GRAMMAR = "grammar"
    NUMERIC_RANGE = "numeric-range"
    COMPOSITION = "composition"


class VersionErrorKind(Enum):
    NULL_STRING = "The provided version string was empty."
    PRE_TRIO_INVALID_CHAR = "The version string contained an invalid character before the version number."
    TRIO_INVALID_CHAR = "The version string contained an invalid character."
    TRIO_ITEM_LEADING_ZERO = "The major, minor, and patch versions may not have leading zeroes."
    TRIO_ITEM_MISSING = "The version string was missing a version component."
    TRIO_ITEM_OVERFLOW = "One or more of the major, minor, or patch versions was greater than the supported maximum."
    TRIO_ITEM_UNEXPECTED = "A version component was found where only a wildcard may appear."
    IDENTIFIER_MISSING = "A pre-release identifier was not found where one was expected."
    IDENTIFIER_INVALID = "One or more pre-release identifiers were invalid."
    METADATA_MISSING = "A build metadata item was not found where one was expected."
    METADATA_INVALID = "One or more build metadata items were invalid."

    @property
    def category(self) -> ErrorCategory:
        if self is VersionErrorKind.NULL_STRING:
            return ErrorCategory.INPUT_ABSENCE
        if self in (VersionErrorKind.TRIO_ITEM_LEADING_ZERO, VersionErrorKind.TRIO_ITEM_OVERFLOW):
            return ErrorCategory.NUMERIC_RANGE
        if self is VersionErrorKind.TRIO_ITEM_UNEXPECTED:
            return ErrorCategory.COMPOSITION
        return ErrorCategory.GRAMMAR


class RangeErrorKind(Enum):
    NULL_STRING = "The version range string cannot be empty or composed entirely of whitespace."
    INVALID_CHARACTER = "The version range string contains one or more invalid characters."
    EMPTY_SET = "A version range string cannot contain a set with no comparators."
    ORPHANED_OPERATOR = "The version range string contains an operator with no associated version (check whitespace)."
    INVALID_VERSION = "The version range string contains one or more invalid version strings."

    @property
    def category(self) -> ErrorCategory:
        if self is RangeErrorKind.NULL_STRING:
            return ErrorCategory.INPUT_ABSENCE
        return ErrorCategory.GRAMMAR


class SemverError(ValueError):
    def __init__(self, kind: "VersionErrorKind | RangeErrorKind", position: "int | None" = None) -> None:
        self.kind = kind
        self.position = position

        message = kind.value
        if position is not None:
            message = f"{message} (at index {position})"
        super().__init__(message)

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category


class VersionParseError(SemverError):
    kind: VersionErrorKind


class RangeParseError(SemverError):
    kind: RangeErrorKind

    def __init__(self, kind: RangeErrorKind, position: "int | None" = None,
                 inner: "VersionParseError | None" = None) -> None:
        super().__init__(kind, position)

        self.inner = inner

    @property
    def category(self) -> ErrorCategory:
        # an embedded literal failure is reported in the literal's own terms
        if self.inner is not None:
            return self.inner.category
        return self.kind.category

    def __str__(self) -> str:
        message = super().__str__()
        if self.inner is not None:
            message = f"{message} {self.inner}"
        return message
