from dataclasses import dataclass
from enum import Enum
from typing import Union

from .version import IDENTIFIER_START, INT32_MAX, METADATA_START, SEPARATOR, ComponentState, Version

# nothing has lower precedence than this, so "< NOTHING" can never hold
NOTHING = Version(0, 0, 0, ("0",))


class Operator(Enum):
    EQUAL = "="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_OR_EQUAL = "<="
    GREATER_OR_EQUAL = ">="
    CARET = "^"
    TILDE = "~"
    HYPHEN = "-"
    WILDCARD = "*"


@dataclass(frozen=True)
class Bound:
    version: Version
    inclusive: bool

    def admits_above(self, version: Version) -> bool:
        result = version.compare_to(self.version)
        return result > 0 or result == 0 and self.inclusive

    def admits_below(self, version: Version) -> bool:
        result = version.compare_to(self.version)
        return result < 0 or result == 0 and self.inclusive


Interval = tuple["Bound | None", "Bound | None"]
EVERYTHING: Interval = (None, None)
EMPTY: Interval = (None, Bound(NOTHING, False))


def specified(version: Version) -> int:
    """Number of leading trio components written out as numbers."""
    if version.is_prerelease:
        return 3

    count = 0
    for state in version.component_states:
        if state is not ComponentState.PRESENT:
            break
        count += 1
    return count


def bump(version: Version, index: int) -> "Version | None":
    trio = list(version.trio)
    if trio[index] == INT32_MAX:
        return None

    trio[index] += 1
    for position in range(index + 1, len(trio)):
        trio[position] = 0
    return Version(*trio)


def exclusive(version: "Version | None") -> "Bound | None":
    return None if version is None else Bound(version, False)


def x_range_bounds(operator: Operator, version: Version) -> Interval:
    count = specified(version)

    if count == 3:
        if operator is Operator.LESS_THAN:
            return None, Bound(version, False)
        if operator is Operator.LESS_OR_EQUAL:
            return None, Bound(version, True)
        if operator is Operator.GREATER_THAN:
            return Bound(version, False), None
        if operator is Operator.GREATER_OR_EQUAL:
            return Bound(version, True), None
        return Bound(version, True), Bound(version, True)

    if count == 0:
        if operator in (Operator.LESS_THAN, Operator.GREATER_THAN):
            return EMPTY
        return EVERYTHING

    low = Version(*version.trio)
    high = bump(version, count - 1)
    if operator is Operator.LESS_THAN:
        return None, Bound(low, False)
    if operator is Operator.LESS_OR_EQUAL:
        return None, exclusive(high)
    if operator is Operator.GREATER_THAN:
        return EMPTY if high is None else (Bound(high, True), None)
    if operator is Operator.GREATER_OR_EQUAL:
        return Bound(low, True), None
    return Bound(low, True), exclusive(high)


def caret_bounds(version: Version) -> Interval:
    states = version.component_states
    if states[0] is ComponentState.WILDCARD:
        return EVERYTHING

    # wildcards only ever form a suffix of the trio
    considered = sum(state is not ComponentState.WILDCARD for state in states)
    trio = version.trio
    index = next((i for i in range(considered) if trio[i] != 0), considered - 1)
    return Bound(version, True), exclusive(bump(version, index))


def tilde_bounds(version: Version) -> Interval:
    major, minor, _ = version.component_states
    if major is ComponentState.WILDCARD:
        return EVERYTHING
    if minor is not ComponentState.PRESENT:
        return Bound(version, True), exclusive(bump(version, 0))
    return Bound(version, True), exclusive(bump(version, 1))


def hyphen_bounds(left: Version, right: Version) -> Interval:
    lower = None if left.component_states[0] is ComponentState.WILDCARD else Bound(left, True)

    major, minor, patch = right.component_states
    if major is ComponentState.WILDCARD:
        upper = None
    elif minor is not ComponentState.PRESENT:
        upper = exclusive(bump(right, 0))
    elif patch is not ComponentState.PRESENT:
        upper = exclusive(bump(right, 1))
    else:
        upper = Bound(right, True)
    return lower, upper


def within(interval: Interval, version: Version) -> bool:
    lower, upper = interval
    if lower is not None and not lower.admits_above(version):
        return False
    return upper is None or upper.admits_below(version)


def side(interval: Interval, version: Version) -> int:
    """-1 below the interval, 1 above it, 0 inside."""
    lower, upper = interval
    if lower is not None and not lower.admits_above(version):
        return -1
    if upper is not None and not upper.admits_below(version):
        return 1
    return 0


def comparable(reference: Version, version: Version) -> bool:
    # a pre-release only ever matches a comparator naming the same trio's pre-releases
    if not version.is_prerelease:
        return True
    return reference.is_prerelease and reference.trio == version.trio


def render_literal(version: Version) -> str:
    parts = []
    for number, state in zip(version.trio, version.component_states):
        if state is ComponentState.OMITTED:
            break
        parts.append("x" if state is ComponentState.WILDCARD else str(number))

    value = SEPARATOR.join(parts)
    if version.identifiers:
        value += IDENTIFIER_START + SEPARATOR.join(version.identifiers)
    if version.metadata:
        value += METADATA_START + SEPARATOR.join(version.metadata)
    return value


"""################ comparators ################"""


class UnaryComparator:
    def __init__(self, operator: Operator, version: Version) -> None:
        if operator is Operator.HYPHEN:
            raise ValueError("A hyphen range needs two versions.")

        self.operator = operator
        self.version = version

        if operator is Operator.CARET:
            self.interval = caret_bounds(version)
        elif operator is Operator.TILDE:
            self.interval = tilde_bounds(version)
        else:
            self.interval = x_range_bounds(operator, version)

    def satisfied_by(self, version: Version) -> bool:
        return within(self.interval, version)

    def compare_to(self, version: Version) -> int:
        return side(self.interval, version)

    def comparable_to(self, version: Version) -> bool:
        return comparable(self.version, version)

    def __str__(self) -> str:
        if self.operator in (Operator.EQUAL, Operator.WILDCARD):
            return render_literal(self.version)
        return self.operator.value + render_literal(self.version)

    def __repr__(self) -> str:
        return f"UnaryComparator({self.operator.name}, '{self}')"


class BinaryComparator:
    operator = Operator.HYPHEN

    def __init__(self, left: Version, right: Version) -> None:
        self.left = left
        self.right = right
        self.interval = hyphen_bounds(left, right)

    def satisfied_by(self, version: Version) -> bool:
        return within(self.interval, version)

    def compare_to(self, version: Version) -> int:
        return side(self.interval, version)

    def comparable_to(self, version: Version) -> bool:
        return comparable(self.left, version) or comparable(self.right, version)

    def __str__(self) -> str:
        return f"{render_literal(self.left)} - {render_literal(self.right)}"

    def __repr__(self) -> str:
        return f"BinaryComparator('{self}')"


Comparator = Union[UnaryComparator, BinaryComparator]
