"""
Bud value model.

Bud values are represented directly by Python objects: ``None`` is Void,
``bool`` is Boolean, ``int`` is Integer (checked against the signed 64-bit
range), ``float`` is Real and ``str`` is String. This module implements
conversions, truthiness and the arithmetic/comparison operators the
interpreter dispatches to.
"""

from __future__ import annotations

import math
from typing import Any

from ..utils.exceptions import FaultKind, RuntimeFault

INTEGER_MIN = -(2 ** 63)
INTEGER_MAX = 2 ** 63 - 1

TYPE_NAMES = ("String", "Integer", "Real", "Boolean")


def type_name(value: Any) -> str:
    """Return the Bud type name of a value."""
    if value is None:
        return "Void"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, int):
        return "Integer"
    if isinstance(value, float):
        return "Real"
    if isinstance(value, str):
        return "String"
    return type(value).__name__


def is_value(value: Any) -> bool:
    """Check whether a Python object can be held by the evaluator."""
    if value is None or isinstance(value, (bool, float, str)):
        return True
    if isinstance(value, int):
        return INTEGER_MIN <= value <= INTEGER_MAX
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_integer(value: int) -> int:
    """Fault if an integer result does not fit in 64 bits."""
    if not INTEGER_MIN <= value <= INTEGER_MAX:
        raise RuntimeFault(FaultKind.VALUE_OUT_OF_RANGE, "Integer overflow", value)
    return value


def format_real(value: float) -> str:
    """Format a Real the way Bud displays it."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value.is_integer():
        return str(int(value))
    return repr(value)


def to_string(value: Any) -> str:
    """
    Convert a value to its String form.

    Raises:
        RuntimeFault: TypeMismatch for Void or foreign values
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return format_real(value)
    raise RuntimeFault.type_mismatch(f"Cannot convert {type_name(value)} to String", type_name(value))


def to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise RuntimeFault(FaultKind.VALUE_OUT_OF_RANGE, "Real is not finite", format_real(value))
        return check_integer(int(value))
    if isinstance(value, str):
        try:
            return check_integer(int(value.strip()))
        except ValueError:
            raise RuntimeFault.type_mismatch(f"Cannot convert {value!r} to Integer", value)
    raise RuntimeFault.type_mismatch(f"Cannot convert {type_name(value)} to Integer", type_name(value))


def to_real(value: Any) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise RuntimeFault.type_mismatch(f"Cannot convert {value!r} to Real", value)
    raise RuntimeFault.type_mismatch(f"Cannot convert {type_name(value)} to Real", type_name(value))


def truthy(value: Any) -> bool:
    """Boolean interpretation used by conditions and logical operators."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    raise RuntimeFault.type_mismatch(f"Cannot convert {type_name(value)} to Boolean", type_name(value))


_CONVERSIONS = {
    "String": to_string,
    "Integer": to_integer,
    "Real": to_real,
    "Boolean": truthy,
}


def convert(value: Any, target: str) -> Any:
    """Apply an `as` conversion."""
    return _CONVERSIONS[target](value)


def _mismatch(op: str, left: Any, right: Any) -> RuntimeFault:
    return RuntimeFault.type_mismatch(
        f"Unsupported operand types for {op}: {type_name(left)} and {type_name(right)}",
        op,
    )


def add(left: Any, right: Any) -> Any:
    if isinstance(left, str) and isinstance(right, str):
        return left + right
    if _is_number(left) and _is_number(right):
        result = left + right
        return check_integer(result) if isinstance(result, int) else result
    raise _mismatch("+", left, right)


def subtract(left: Any, right: Any) -> Any:
    if _is_number(left) and _is_number(right):
        result = left - right
        return check_integer(result) if isinstance(result, int) else result
    raise _mismatch("-", left, right)


def multiply(left: Any, right: Any) -> Any:
    if _is_number(left) and _is_number(right):
        result = left * right
        return check_integer(result) if isinstance(result, int) else result
    raise _mismatch("*", left, right)


def divide(left: Any, right: Any) -> Any:
    if not (_is_number(left) and _is_number(right)):
        raise _mismatch("/", left, right)
    if right == 0:
        raise RuntimeFault(FaultKind.DIVIDE_BY_ZERO, "Division by zero")
    if isinstance(left, int) and isinstance(right, int):
        # Integer division truncates toward zero
        quotient = abs(left) // abs(right)
        return check_integer(quotient if (left < 0) == (right < 0) else -quotient)
    return left / right


def remainder(left: Any, right: Any) -> Any:
    if not (_is_number(left) and _is_number(right)):
        raise _mismatch("%", left, right)
    if right == 0:
        raise RuntimeFault(FaultKind.DIVIDE_BY_ZERO, "Division by zero")
    if isinstance(left, int) and isinstance(right, int):
        result = abs(left) % abs(right)
        return -result if left < 0 else result
    return math.fmod(left, right)


def negate(value: Any) -> Any:
    if _is_number(value):
        result = -value
        return check_integer(result) if isinstance(result, int) else result
    raise RuntimeFault.type_mismatch(f"Cannot negate {type_name(value)}", type_name(value))


def equals(left: Any, right: Any) -> bool:
    if _is_number(left) and _is_number(right):
        return left == right
    if type_name(left) != type_name(right):
        return False
    return left == right


def compare(op: str, left: Any, right: Any) -> bool:
    """Ordering comparison for numbers and strings."""
    comparable = (_is_number(left) and _is_number(right)) or (
        isinstance(left, str) and isinstance(right, str)
    )
    if not comparable:
        raise _mismatch(op, left, right)
    if op == "<":
        return left < right
    if op == "<=":
        return left <= right
    if op == ">":
        return left > right
    return left >= right


BINARY_OPERATORS = {
    "+": add,
    "-": subtract,
    "*": multiply,
    "/": divide,
    "%": remainder,
}
