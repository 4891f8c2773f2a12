"""Precedence rules for pre-release identifiers.

Numeric identifiers have no length limit, so comparing them by value goes
through a fixed-width fast path first and only falls back to comparing the
digit strings when either side would not fit in a signed 64-bit integer.
"""

DIGITS = '0123456789'
INT64_MAX = 2 ** 63 - 1
INT64_DIGITS = len(str(INT64_MAX))


def is_numeric(identifier: str) -> bool:
    return identifier != "" and all(char in DIGITS for char in identifier)


def parse_int64(digits: str) -> "int | None":
    if len(digits) > INT64_DIGITS:
        return None

    value = int(digits)
    return value if value <= INT64_MAX else None


def compare_digit_strings(left: str, right: str) -> int:
    # both sides are canonical (no leading zeroes), so the longer one is larger
    if len(left) != len(right):
        return 1 if len(left) > len(right) else -1

    for a, b in zip(left, right):
        if a != b:
            return 1 if a > b else -1
    return 0


def compare_numeric(left: str, right: str) -> int:
    a = parse_int64(left)
    b = parse_int64(right)

    if a is None or b is None:
        return compare_digit_strings(left, right)
    return (a > b) - (a < b)


def compare_identifier(left: str, right: str) -> int:
    if left == right:
        return 0

    left_numeric = is_numeric(left)
    right_numeric = is_numeric(right)

    if left_numeric and right_numeric:
        return compare_numeric(left, right)
    if left_numeric:
        return -1
    if right_numeric:
        return 1
    return 1 if left > right else -1


def compare_identifiers(left: "tuple[str, ...]", right: "tuple[str, ...]") -> int:
    if not left and not right:
        return 0
    # a release outranks any pre-release of the same trio
    if not left:
        return 1
    if not right:
        return -1

    for a, b in zip(left, right):
        result = compare_identifier(a, b)
        if result != 0:
            return result

    return (len(left) > len(right)) - (len(left) < len(right))
