import logging
import threading
from enum import Enum, auto
from typing import Iterable

from .cache import Memoizer
from .comparators import BinaryComparator, Comparator, Operator, UnaryComparator
from .errors import RangeErrorKind, RangeParseError, VersionParseError
from .version import DEFAULT_PARSER, ComponentState, ParseMode, Version

logger = logging.getLogger(__name__)

LITERAL_MODE = ParseMode.ALLOW_PREFIX | ParseMode.OPTIONAL_PATCH | ParseMode.ALLOW_WILDCARD
OPERATORS = {
    "=": Operator.EQUAL,
    "<": Operator.LESS_THAN,
    ">": Operator.GREATER_THAN,
    "<=": Operator.LESS_OR_EQUAL,
    ">=": Operator.GREATER_OR_EQUAL,
    "^": Operator.CARET,
    "~": Operator.TILDE,
    "-": Operator.HYPHEN,
}
SIMPLE_OPERATORS = "=^~"
COMPLEX_OPERATORS = "<>"
VERTICAL_BAR = '|'
TILDE = '~'


class State(Enum):
    START = auto()
    CONSUME = auto()
    IDENTIFY = auto()
    COLLAPSE_WHITESPACE = auto()
    UNARY_SIMPLE = auto()
    UNARY_COMPLEX = auto()
    LOGICAL_OR = auto()
    VERSION_STRING = auto()
    TENTATIVE_BINARY = auto()
    COLLECT_SET = auto()
    TERMINATE = auto()


"""################ range parser ################"""


class RangeParser:
    """Single-use state machine turning a range string into comparator sets.

    Each handler leaves the states to run next on a stack, most recent first,
    so that lookahead never needs recursion or un-reading a character.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.sets: list[tuple[Comparator, ...]] = []
        self.current: list[Comparator] = []

        self.__stack__: list[State] = []
        self.__position__ = -1
        self.__char__: "str | None" = None
        self.__operator__: "Operator | None" = None
        self.__buffer__ = ""
        self.__left__: "Version | None" = None
        self.__mode__ = ParseMode.STRICT
        self.__handlers__ = {
            State.START: self.start,
            State.CONSUME: self.consume,
            State.IDENTIFY: self.identify,
            State.COLLAPSE_WHITESPACE: self.collapse_whitespace,
            State.UNARY_SIMPLE: self.unary_simple,
            State.UNARY_COMPLEX: self.unary_complex,
            State.LOGICAL_OR: self.logical_or,
            State.VERSION_STRING: self.version_string,
            State.TENTATIVE_BINARY: self.tentative_binary,
            State.COLLECT_SET: self.collect_set,
        }

    def parse(self) -> "list[tuple[Comparator, ...]]":
        if self.text is None or self.text.strip() == "":
            raise RangeParseError(RangeErrorKind.NULL_STRING)

        state = State.START
        while state is not State.TERMINATE:
            self.__handlers__[state]()
            state = self.pop()
        return self.sets

    def push(self, *states: State) -> None:
        self.__stack__.extend(states)

    def pop(self) -> State:
        if not self.__stack__:
            raise RuntimeError("Version range parser exhausted the available states.")
        return self.__stack__.pop()

    def fail(self, kind: RangeErrorKind) -> RangeParseError:
        return RangeParseError(kind, self.__position__)

    def at_gap(self) -> bool:
        return self.__char__ is None or self.__char__.isspace()

    def start(self) -> None:
        self.push(State.IDENTIFY, State.CONSUME)

    def consume(self) -> None:
        self.__position__ += 1
        self.__char__ = self.text[self.__position__] if self.__position__ < len(self.text) else None

    def collapse_whitespace(self) -> None:
        if self.__char__ is not None and self.__char__.isspace():
            self.push(State.COLLAPSE_WHITESPACE, State.CONSUME)

    def identify(self) -> None:
        char = self.__char__

        if char is None:
            self.push(State.TERMINATE, State.COLLECT_SET)
        elif char.isspace():
            self.push(State.IDENTIFY, State.COLLAPSE_WHITESPACE)
        elif char in SIMPLE_OPERATORS:
            if char == TILDE:
                self.__mode__ = ParseMode.OPTIONAL_MINOR
            self.push(State.UNARY_SIMPLE)
        elif char in COMPLEX_OPERATORS:
            self.push(State.UNARY_COMPLEX)
        elif char == VERTICAL_BAR:
            self.push(State.LOGICAL_OR, State.CONSUME)
        else:
            self.push(State.VERSION_STRING)

    def unary_simple(self) -> None:
        if self.__operator__ is None:
            self.__operator__ = OPERATORS[self.__char__]
            self.push(State.UNARY_SIMPLE, State.CONSUME)
        elif self.at_gap():
            raise self.fail(RangeErrorKind.ORPHANED_OPERATOR)
        else:
            self.push(State.VERSION_STRING)

    def unary_complex(self) -> None:
        if self.__buffer__ == "":
            self.__buffer__ = self.__char__
            self.push(State.UNARY_COMPLEX, State.CONSUME)
        elif len(self.__buffer__) == 1:
            if self.at_gap():
                raise self.fail(RangeErrorKind.ORPHANED_OPERATOR)
            self.__buffer__ += self.__char__
            self.push(State.UNARY_COMPLEX)
        elif self.__buffer__ in OPERATORS:
            self.__operator__ = OPERATORS[self.__buffer__]
            self.__buffer__ = ""
            self.push(State.VERSION_STRING, State.CONSUME)
        else:
            # one-character operator; the lookahead is the first character of the version
            self.__operator__ = OPERATORS[self.__buffer__[0]]
            self.__buffer__ = ""
            self.push(State.VERSION_STRING)

    def logical_or(self) -> None:
        if self.__char__ != VERTICAL_BAR:
            raise self.fail(RangeErrorKind.INVALID_CHARACTER)
        self.push(State.IDENTIFY, State.CONSUME, State.COLLECT_SET)

    def version_string(self) -> None:
        if not self.at_gap() and self.__char__ != VERTICAL_BAR:
            self.__buffer__ += self.__char__
            self.push(State.VERSION_STRING, State.CONSUME)
            return

        if self.__buffer__ == "":
            raise self.fail(RangeErrorKind.ORPHANED_OPERATOR)

        version = self.collect_version()
        if self.__operator__ is None:
            self.__operator__ = Operator.EQUAL
            self.__left__ = version
            self.push(State.TENTATIVE_BINARY)
        elif self.__left__ is None:
            self.collect_unary(version)
            self.push(State.IDENTIFY)
        else:
            self.current.append(BinaryComparator(self.__left__, version))
            self.__operator__ = None
            self.__left__ = None
            self.push(State.IDENTIFY)

    def tentative_binary(self) -> None:
        char = self.__char__

        if char is None:
            self.collect_unary(self.__left__)
            self.push(State.TERMINATE, State.COLLECT_SET)
        elif char.isspace():
            self.push(State.TENTATIVE_BINARY, State.COLLAPSE_WHITESPACE)
        elif OPERATORS.get(char) is Operator.HYPHEN:
            self.__operator__ = Operator.HYPHEN
            self.push(State.VERSION_STRING, State.COLLAPSE_WHITESPACE, State.CONSUME)
        else:
            self.collect_unary(self.__left__)
            self.__left__ = None
            self.push(State.IDENTIFY)

    def collect_set(self) -> None:
        if not self.current:
            raise self.fail(RangeErrorKind.EMPTY_SET)

        self.sets.append(tuple(self.current))
        self.current = []

    def collect_version(self) -> Version:
        literal, self.__buffer__ = self.__buffer__, ""
        mode, self.__mode__ = LITERAL_MODE | self.__mode__, ParseMode.STRICT

        try:
            return DEFAULT_PARSER.parse_literal(literal, mode)
        except VersionParseError as error:
            logger.debug("Rejected version %r in range %r: %s", literal, self.text, error.kind.name)
            raise RangeParseError(RangeErrorKind.INVALID_VERSION, self.__position__ - len(literal), error) from error

    def collect_unary(self, version: Version) -> None:
        operator = self.__operator__
        if operator is Operator.EQUAL and ComponentState.WILDCARD in version.component_states:
            operator = Operator.WILDCARD

        self.current.append(UnaryComparator(operator, version))
        self.__operator__ = None


"""################ version range ################"""


def compare_to_set(comparators: "tuple[Comparator, ...]", version: Version) -> int:
    mismatch = 0
    for comparator in comparators:
        result = comparator.compare_to(version)
        if mismatch == 0:
            mismatch = result
        elif result != 0 and result != mismatch:
            # bounded on both sides: the version sits in a gap
            return 0
    return mismatch


class VersionRange:
    """An OR of comparator sets, each an AND of comparators.

    ``cache`` may be any :class:`~semver_ranges.cache.Memoizer` from versions
    to results. This range holds ``lock`` while touching it, and callers that
    share the store elsewhere should do the same.
    """

    def __init__(self, sets: Iterable[Iterable[Comparator]],
                 cache: "Memoizer[Version, bool] | None" = None) -> None:
        sets = tuple(tuple(comparators) for comparators in sets)
        if not sets or any(not comparators for comparators in sets):
            raise ValueError("A version range needs at least one set, and every set at least one comparator.")

        self.sets = sets
        self.cache = cache
        self.lock = threading.Lock()

    @classmethod
    def parse(cls, text: str, cache: "Memoizer[Version, bool] | None" = None) -> "VersionRange":
        return cls(RangeParser(text).parse(), cache)

    @classmethod
    def try_parse(cls, text: str,
                  cache: "Memoizer[Version, bool] | None" = None) -> "tuple[bool, VersionRange | None]":
        try:
            return True, cls.parse(text, cache)
        except RangeParseError:
            return False, None

    def satisfied_by(self, version: Version) -> bool:
        if self.cache is not None:
            with self.lock:
                cached = self.cache.try_get(version)
            if cached is not None:
                return cached

        result = any(
            any(comparator.comparable_to(version) for comparator in comparators)
            and all(comparator.satisfied_by(version) for comparator in comparators)
            for comparators in self.sets
        )

        if self.cache is not None:
            with self.lock:
                self.cache.insert(version, result)
        return result

    def satisfied_by_all(self, versions: Iterable[Version]) -> bool:
        return all(self.satisfied_by(version) for version in versions)

    def comparable_to(self, version: Version) -> bool:
        return any(comparator.comparable_to(version) for comparators in self.sets for comparator in comparators)

    def compare_to(self, version: Version) -> int:
        """1 if ``version`` is above everything this range accepts, -1 if below it, otherwise 0.

        A version falling in a gap of a noncontiguous range (``1.9.0`` against
        ``>1.7 <1.8 || 2.0.0``) is neither, and so also gives 0. Pre-release
        comparability is not considered.
        """
        if any(all(comparator.satisfied_by(version) for comparator in comparators) for comparators in self.sets):
            return 0

        seed = compare_to_set(self.sets[0], version)
        if all(compare_to_set(comparators, version) == seed for comparators in self.sets[1:]):
            return seed
        return 0

    def __str__(self) -> str:
        return " || ".join(" ".join(str(comparator) for comparator in comparators) for comparators in self.sets)

    def __repr__(self) -> str:
        return f"VersionRange('{self}')"
