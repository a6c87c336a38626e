"""Chicken value types and coercions.

Chicken inherited its semantics from a JavaScript host, so values follow a
small slice of the JavaScript coercion rules. Python natives stand in for
the primitive variants:

* ``float`` for numbers (never ``bool``, which Python treats as an int)
* ``str`` for text
* ``bool`` for booleans
* ``UNDEFINED`` for undefined
* ``SELF_REFERENCE`` for the sentinel at address 0 of memory
"""

from decimal import Decimal
from typing import Any, Optional, Union
import math
import re


class ChickenUndefined:
    """Chicken undefined value (singleton)."""

    _instance: Optional["ChickenUndefined"] = None

    def __new__(cls) -> "ChickenUndefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __str__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


class ChickenSelfReference:
    """Marker for "the whole of memory", stored at address 0 (singleton).

    It is never a real pointer; Load resolves it against the live memory
    list when it is read.
    """

    _instance: Optional["ChickenSelfReference"] = None

    def __new__(cls) -> "ChickenSelfReference":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<self>"

    def __str__(self) -> str:
        return SELF_TEXT


# Singleton instances
UNDEFINED = ChickenUndefined()
SELF_REFERENCE = ChickenSelfReference()

# Command line arguments cannot carry NUL, so --input never produces this.
# Python callers passing arbitrary text through Config.input still can.
SELF_TEXT = "\x00[self reference]"


# Type alias for Chicken values
ChickenValue = Union[
    ChickenUndefined,
    ChickenSelfReference,
    bool,
    float,
    str,
]


_DECIMAL_LITERAL = re.compile(
    r"[+-]?(?:Infinity|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
)
# JavaScript WhiteSpace and LineTerminator characters
JS_WHITESPACE = (
    " \t\n\v\f\r\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005"
    "\u2006\u2007\u2008\u2009\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
)
_RADIX_LITERALS = (
    (re.compile(r"0[xX][0-9a-fA-F]+"), 16),
    (re.compile(r"0[oO][0-7]+"), 8),
    (re.compile(r"0[bB][01]+"), 2),
)


def is_number(value: Any) -> bool:
    """Check if value is a Chicken number (bools excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_nan(value: Any) -> bool:
    """Check if value is NaN."""
    return isinstance(value, float) and math.isnan(value)


def type_name(value: ChickenValue) -> str:
    """Return a short name for the variant of a value."""
    if value is UNDEFINED:
        return "undefined"
    if value is SELF_REFERENCE:
        return "self"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return "undefined"


def to_boolean(value: ChickenValue) -> bool:
    """Convert a Chicken value to boolean."""
    if value is UNDEFINED:
        return False
    if value is SELF_REFERENCE:
        return True
    if isinstance(value, bool):
        return value
    if is_number(value):
        if is_nan(value) or value == 0:
            return False
        return True
    if isinstance(value, str):
        return len(value) > 0
    return False


def _string_to_number(s: str) -> float:
    s = s.strip(JS_WHITESPACE)
    if s == "":
        return 0.0
    if _DECIMAL_LITERAL.fullmatch(s):
        # float() understands "Infinity" as well as plain decimals
        return float(s)
    for pattern, radix in _RADIX_LITERALS:
        if pattern.fullmatch(s):
            return float(int(s[2:], radix))
    return math.nan


def to_number(value: ChickenValue) -> float:
    """Convert a Chicken value to number."""
    if value is UNDEFINED or value is SELF_REFERENCE:
        return math.nan
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        return _string_to_number(value)
    return math.nan


def to_integer(value: ChickenValue) -> Optional[int]:
    """Convert to number and truncate toward zero.

    Returns None when the number is NaN or infinite.
    """
    n = to_number(value)
    if math.isnan(n) or math.isinf(n):
        return None
    return int(n)


def number_to_string(n: float) -> str:
    """Format a number the way JavaScript's Number.prototype.toString does."""
    if math.isnan(n):
        return "NaN"
    if n == 0:
        return "0"
    if math.isinf(n):
        return "Infinity" if n > 0 else "-Infinity"
    if n < 0:
        return "-" + number_to_string(-n)

    # repr() gives the shortest digits that round-trip
    _, digit_tuple, exponent = Decimal(repr(float(n))).as_tuple()
    digits = list(digit_tuple)
    while len(digits) > 1 and digits[-1] == 0:
        digits.pop()
        exponent += 1
    while len(digits) > 1 and digits[0] == 0:
        digits.pop(0)
    s = "".join(str(d) for d in digits)
    k = len(s)
    point = k + exponent

    if k <= point <= 21:
        return s + "0" * (point - k)
    if 0 < point <= 21:
        return s[:point] + "." + s[point:]
    if -6 < point <= 0:
        return "0." + "0" * (-point) + s

    e = point - 1
    sign = "+" if e >= 0 else "-"
    if k == 1:
        return f"{s}e{sign}{abs(e)}"
    return f"{s[0]}.{s[1:]}e{sign}{abs(e)}"


def to_string(value: ChickenValue) -> str:
    """Convert a Chicken value to string."""
    if value is UNDEFINED:
        return "undefined"
    if value is SELF_REFERENCE:
        return SELF_TEXT
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return number_to_string(float(value))
    if isinstance(value, str):
        return value
    return "undefined"


def loose_equals(a: ChickenValue, b: ChickenValue) -> bool:
    """Chicken's compare instruction (JavaScript == without objects or null)."""
    # The sentinel is never equal to anything, itself included
    if a is SELF_REFERENCE or b is SELF_REFERENCE:
        return False

    if a is UNDEFINED or b is UNDEFINED:
        return a is b

    if isinstance(a, str) and isinstance(b, str):
        return a == b

    if isinstance(a, bool) and isinstance(b, bool):
        return a == b

    # number/number, number/string, boolean/anything else
    return to_number(a) == to_number(b)


def display(value: ChickenValue) -> str:
    """Render a value for stack dumps and the debugger."""
    if value is SELF_REFERENCE:
        return "<self>"
    if isinstance(value, str):
        return repr(value)
    return to_string(value)
