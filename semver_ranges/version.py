import logging
import string
import threading
from enum import Enum, IntFlag
from typing import Iterable

from .cache import Memoizer
from .errors import VersionErrorKind, VersionParseError
from .precedence import DIGITS, compare_identifiers, is_numeric

logger = logging.getLogger(__name__)

WILDCARD = "xX*"
PREFIX = "vV"
SEPARATOR = '.'
IDENTIFIER_START = '-'
METADATA_START = '+'
ITEM_CHARS = frozenset(DIGITS + string.ascii_letters + '-')
INT32_MAX = 2 ** 31 - 1
INT32_DIGITS = len(str(INT32_MAX))


class ParseMode(IntFlag):
    STRICT = 0
    ALLOW_PREFIX = 1 << 0
    OPTIONAL_PATCH = 1 << 1
    GREEDY = 1 << 2
    LENIENT = ALLOW_PREFIX | OPTIONAL_PATCH

    # only honoured for range literals, stripped from public entry points
    OPTIONAL_MINOR = 1 << 28
    ALLOW_WILDCARD = 1 << 29


PUBLIC_MODES = ParseMode.ALLOW_PREFIX | ParseMode.OPTIONAL_PATCH | ParseMode.GREEDY
INTERNAL_MODES = ParseMode.OPTIONAL_MINOR | ParseMode.ALLOW_WILDCARD


class ComponentState(Enum):
    PRESENT = "present"
    OMITTED = "omitted"
    WILDCARD = "wildcard"


ALL_PRESENT = (ComponentState.PRESENT,) * 3


def is_valid_metadata(item: str) -> bool:
    return isinstance(item, str) and item != "" and all(char in ITEM_CHARS for char in item)


def is_valid_identifier(item: str) -> bool:
    if not is_valid_metadata(item):
        return False
    return not (len(item) > 1 and item[0] == '0' and is_numeric(item))


"""################ version ################"""


class Version:
    """An immutable semantic version.

    Ordering operators follow precedence (build metadata ignored), while ``==``
    is exact equality and so does take metadata into account. Use
    :meth:`equivalent_to` for precedence-only equality.
    """

    def __init__(self, major: int, minor: int = 0, patch: int = 0,
                 identifiers: Iterable[str] = (), metadata: Iterable[str] = ()) -> None:
        for name, value in (("major", major), ("minor", minor), ("patch", patch)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"The {name} version component must be an integer.")
            if value < 0:
                raise ValueError(f"The {name} version component cannot be negative.")
            if value > INT32_MAX:
                raise ValueError(f"The {name} version component cannot exceed {INT32_MAX}.")

        identifiers = tuple(identifiers)
        metadata = tuple(metadata)
        if not all(is_valid_identifier(item) for item in identifiers):
            raise ValueError("One or more pre-release identifiers is invalid.")
        if not all(is_valid_metadata(item) for item in metadata):
            raise ValueError("One or more build metadata items is invalid.")

        self._major = major
        self._minor = minor
        self._patch = patch
        self._identifiers = identifiers
        self._metadata = metadata
        self._states = ALL_PRESENT

    @classmethod
    def _parsed(cls, major: int, minor: int, patch: int, identifiers: Iterable[str],
                metadata: Iterable[str], states: "tuple[ComponentState, ...]") -> "Version":
        version = cls(major, minor, patch, identifiers, metadata)
        version._states = tuple(states)
        return version

    @classmethod
    def parse(cls, text: str, mode: ParseMode = ParseMode.STRICT) -> "Version":
        return parse(text, mode)

    @classmethod
    def try_parse(cls, text: str, mode: ParseMode = ParseMode.STRICT) -> "tuple[bool, Version | None]":
        return try_parse(text, mode)

    @property
    def major(self) -> int:
        return self._major

    @property
    def minor(self) -> int:
        return self._minor

    @property
    def patch(self) -> int:
        return self._patch

    @property
    def identifiers(self) -> "tuple[str, ...]":
        return self._identifiers

    @property
    def metadata(self) -> "tuple[str, ...]":
        return self._metadata

    @property
    def component_states(self) -> "tuple[ComponentState, ComponentState, ComponentState]":
        """Presence of major, minor and patch in the text this was parsed from."""
        return self._states

    @property
    def trio(self) -> "tuple[int, int, int]":
        return self._major, self._minor, self._patch

    @property
    def is_prerelease(self) -> bool:
        return len(self._identifiers) > 0

    def compare_to(self, version: "Version") -> int:
        if version is self:
            return 0
        if self.trio != version.trio:
            return 1 if self.trio > version.trio else -1
        return compare_identifiers(self._identifiers, version._identifiers)

    def equivalent_to(self, version: "Version | None") -> bool:
        if version is None:
            return False
        return self.trio == version.trio and self._identifiers == version._identifiers

    def compatible_with(self, version: "Version | None") -> bool:
        """Whether ``version`` can replace this one without breaking consumers."""
        if version is None:
            return False
        if self.equivalent_to(version):
            return True
        if self._major != version._major:
            return False
        if self._major == 0 or version._major == 0:
            return False

        if not self.is_prerelease and version.is_prerelease:
            return (version._minor, version._patch) > (self._minor, self._patch)
        if self.is_prerelease:
            return False
        return version > self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.equivalent_to(other) and self._metadata == other._metadata

    def __hash__(self) -> int:
        return hash((self.trio, self._identifiers, self._metadata))

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare_to(other) >= 0

    def __str__(self) -> str:
        value = f"{self._major}.{self._minor}.{self._patch}"
        if self._identifiers:
            value += IDENTIFIER_START + SEPARATOR.join(self._identifiers)
        if self._metadata:
            value += METADATA_START + SEPARATOR.join(self._metadata)
        return value

    def __repr__(self) -> str:
        return f"Version('{self}')"


def compare(left: Version, right: Version) -> int:
    return left.compare_to(right)


"""################ parser ################"""


class VersionPart:
    def __init__(self, terminator: str) -> None:
        self.value = ""

        self.__terminator__ = terminator

    def accept(self, char: str) -> bool:
        if char in self.__terminator__:
            self.validate()
            return True

        if not self.is_valid(char):
            raise VersionParseError(self.invalid_kind())

        self.value += char
        return False

    def is_valid(self, char: str) -> bool:
        return False

    def invalid_kind(self) -> VersionErrorKind:
        return VersionErrorKind.TRIO_INVALID_CHAR

    def validate(self) -> None:
        pass


class Component(VersionPart):
    def __init__(self, allow_wildcard: bool = False) -> None:
        super().__init__(SEPARATOR + IDENTIFIER_START + METADATA_START)

        self.number = 0
        self.state = ComponentState.PRESENT

        self.__allow_wildcard__ = allow_wildcard

    @property
    def is_wildcard(self) -> bool:
        return len(self.value) == 1 and self.value in WILDCARD

    def is_valid(self, char: str) -> bool:
        if self.is_wildcard:
            return False
        if char in DIGITS:
            return True
        return self.__allow_wildcard__ and self.value == "" and char in WILDCARD

    def validate(self) -> None:
        if self.value == "":
            raise VersionParseError(VersionErrorKind.TRIO_ITEM_MISSING)
        if self.is_wildcard:
            self.state = ComponentState.WILDCARD
            return
        if len(self.value) > 1 and self.value[0] == '0':
            raise VersionParseError(VersionErrorKind.TRIO_ITEM_LEADING_ZERO)
        if len(self.value) > INT32_DIGITS or int(self.value) > INT32_MAX:
            raise VersionParseError(VersionErrorKind.TRIO_ITEM_OVERFLOW)

        self.number = int(self.value)

    def salvage(self) -> bool:
        if self.value == "" or self.is_wildcard or (len(self.value) > 1 and self.value[0] == '0'):
            return False

        # overflow is the only failure left and it is never recoverable
        self.validate()
        return True


class ItemList(VersionPart):
    missing = VersionErrorKind.METADATA_MISSING
    invalid = VersionErrorKind.METADATA_INVALID

    def __init__(self, terminator: str = "") -> None:
        super().__init__(terminator)

        self.items: list[str] = []

    def accept(self, char: str) -> bool:
        if char == SEPARATOR:
            self.validate()
            return False
        return super().accept(char)

    def is_valid(self, char: str) -> bool:
        return char in ITEM_CHARS

    def is_valid_item(self, item: str) -> bool:
        return is_valid_metadata(item)

    def invalid_kind(self) -> VersionErrorKind:
        return self.invalid

    def validate(self) -> None:
        if self.value == "":
            raise VersionParseError(self.missing)
        if not self.is_valid_item(self.value):
            raise VersionParseError(self.invalid)

        self.items.append(self.value)
        self.value = ""

    def salvage(self) -> None:
        if self.value != "" and self.is_valid_item(self.value):
            self.items.append(self.value)
        self.value = ""


class Identifiers(ItemList):
    missing = VersionErrorKind.IDENTIFIER_MISSING
    invalid = VersionErrorKind.IDENTIFIER_INVALID

    def __init__(self) -> None:
        super().__init__(METADATA_START)

    def is_valid_item(self, item: str) -> bool:
        return is_valid_identifier(item)


class Metadata(ItemList):
    pass


FATAL_KINDS = frozenset({
    VersionErrorKind.NULL_STRING,
    VersionErrorKind.PRE_TRIO_INVALID_CHAR,
    VersionErrorKind.TRIO_ITEM_OVERFLOW,
    VersionErrorKind.TRIO_ITEM_UNEXPECTED,
})


class VersionBuilder:
    """Single-use, character-at-a-time parse of a normalised version string."""

    def __init__(self, mode: ParseMode = ParseMode.STRICT) -> None:
        allow_wildcard = bool(mode & ParseMode.ALLOW_WILDCARD)

        self.mode = mode
        self.major = Component(allow_wildcard)
        self.minor = Component(allow_wildcard)
        self.patch = Component(allow_wildcard)
        self.identifiers = Identifiers()
        self.metadata = Metadata()
        self.trio = [self.major, self.minor, self.patch]
        self.parts: list[VersionPart] = [*self.trio, self.identifiers, self.metadata]

        self.__current__ = 0
        self.__completed__ = 0

    @property
    def optional_patch(self) -> bool:
        return bool(self.mode & ParseMode.OPTIONAL_PATCH)

    @property
    def optional_minor(self) -> bool:
        return self.optional_patch and bool(self.mode & ParseMode.OPTIONAL_MINOR)

    def build(self, text: str) -> Version:
        try:
            for char in text:
                self.accept(char)
            self.finish()
        except VersionParseError as error:
            if not self.mode & ParseMode.GREEDY or not self.recover(error):
                raise
            logger.debug("Greedy parse of %r truncated after %s", text, error.kind.name)

        return self.construct()

    def accept(self, char: str) -> None:
        if self.__current__ >= len(self.trio):
            if self.parts[self.__current__].accept(char):
                self.__current__ += 1
            return

        component = self.trio[self.__current__]
        if not component.accept(char):
            return

        self.__complete__(self.__current__)
        if char == SEPARATOR:
            if self.__current__ == len(self.trio) - 1:
                raise VersionParseError(VersionErrorKind.TRIO_INVALID_CHAR)
            self.__current__ += 1
        else:
            self.__omit_from__(self.__current__ + 1)
            self.__enter_tail__(char)

    def finish(self) -> None:
        if self.__current__ >= len(self.trio):
            self.parts[self.__current__].validate()
            return

        self.trio[self.__current__].validate()
        self.__complete__(self.__current__)
        self.__omit_from__(self.__current__ + 1)

    def recover(self, error: VersionParseError) -> bool:
        if error.kind in FATAL_KINDS:
            return False

        if self.__current__ < len(self.trio):
            if self.trio[self.__current__].salvage():
                self.__completed__ = self.__current__ + 1
        else:
            self.parts[self.__current__].salvage()

        if self.__completed__ == 0:
            return False

        for component in self.trio[self.__completed__:]:
            component.number = 0
            component.state = ComponentState.OMITTED
        return True

    def construct(self) -> Version:
        return Version._parsed(
            self.major.number, self.minor.number, self.patch.number,
            self.identifiers.items, self.metadata.items,
            (self.major.state, self.minor.state, self.patch.state),
        )

    def __complete__(self, index: int) -> None:
        if index > 0 and self.trio[index - 1].state is ComponentState.WILDCARD \
                and self.trio[index].state is not ComponentState.WILDCARD:
            raise VersionParseError(VersionErrorKind.TRIO_ITEM_UNEXPECTED)
        self.__completed__ = index + 1

    def __omit_from__(self, index: int) -> None:
        for position in range(index, len(self.trio)):
            if self.trio[position - 1].state is ComponentState.WILDCARD:
                self.trio[position].state = ComponentState.WILDCARD
            elif position == 1 and not self.optional_minor or position == 2 and not self.optional_patch:
                raise VersionParseError(VersionErrorKind.TRIO_ITEM_MISSING)
            else:
                self.trio[position].state = ComponentState.OMITTED

    def __enter_tail__(self, char: str) -> None:
        # a wildcard stands for every release below it, so it cannot carry labels
        if any(component.state is ComponentState.WILDCARD for component in self.trio):
            raise VersionParseError(VersionErrorKind.TRIO_INVALID_CHAR)
        self.__current__ = len(self.trio) if char == IDENTIFIER_START else len(self.trio) + 1


def normalise(text: str, mode: ParseMode = ParseMode.STRICT) -> str:
    if text is None or text.strip() == "":
        raise VersionParseError(VersionErrorKind.NULL_STRING)

    text = text.strip()
    first = text[0]
    if first in DIGITS or mode & ParseMode.ALLOW_WILDCARD and first in WILDCARD:
        return text
    if not mode & ParseMode.ALLOW_PREFIX or first not in PREFIX:
        raise VersionParseError(VersionErrorKind.PRE_TRIO_INVALID_CHAR)
    return text[1:]


class VersionParser:
    """Parses version strings, optionally memoizing the results.

    The lock guards every access this parser makes to ``cache``; callers
    touching the same store should hold ``lock`` as well.
    """

    def __init__(self, cache: "Memoizer[tuple[str, ParseMode], Version] | None" = None) -> None:
        self.cache = cache
        self.lock = threading.Lock()

    def parse(self, text: str, mode: ParseMode = ParseMode.STRICT) -> Version:
        return self.parse_literal(text, mode & PUBLIC_MODES)

    def try_parse(self, text: str, mode: ParseMode = ParseMode.STRICT) -> "tuple[bool, Version | None]":
        try:
            return True, self.parse(text, mode)
        except VersionParseError:
            return False, None

    def parse_literal(self, text: str, mode: ParseMode) -> Version:
        normalised = normalise(text, mode)

        cacheable = self.cache is not None and not mode & INTERNAL_MODES
        if cacheable:
            key = (normalised, ParseMode(mode))
            with self.lock:
                cached = self.cache.try_get(key)
            if cached is not None:
                logger.debug("Version cache hit for %r", normalised)
                return cached

        version = VersionBuilder(mode).build(normalised)

        if cacheable:
            with self.lock:
                self.cache.insert(key, version)
        return version


DEFAULT_PARSER = VersionParser()


def parse(text: str, mode: ParseMode = ParseMode.STRICT) -> Version:
    return DEFAULT_PARSER.parse(text, mode)


def try_parse(text: str, mode: ParseMode = ParseMode.STRICT) -> "tuple[bool, Version | None]":
    return DEFAULT_PARSER.try_parse(text, mode)
