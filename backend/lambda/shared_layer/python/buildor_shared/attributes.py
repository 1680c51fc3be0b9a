"""buildor_shared.attributes — Typed access to raw DynamoDB attribute values.

A DynamoDB attribute value is a single-key dict whose key is the type tag
(``{"S": "abc"}``, ``{"N": "42"}``, ``{"L": [...]}``, ``{"M": {...}}``). The
accessors below read one tag explicitly and raise ``AttributeTypeError`` on a
mismatch instead of casting.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from buildor_shared.errors import AttributeTypeError

AttributeValue = Dict[str, Any]
AttributeMap = Dict[str, AttributeValue]


def _tagged(value: Any, tag: str) -> Any:
    if not isinstance(value, dict) or tag not in value:
        raise AttributeTypeError(tag, value)
    return value[tag]


def as_s(value: AttributeValue) -> str:
    return str(_tagged(value, "S"))


def as_l(value: AttributeValue) -> List[AttributeValue]:
    return list(_tagged(value, "L"))


def as_m(value: AttributeValue) -> AttributeMap:
    return dict(_tagged(value, "M"))


def as_int_lenient(value: AttributeValue) -> int:
    """Read a number, defaulting to 0 when the payload is not a parseable number."""
    raw = value.get("N", value.get("S")) if isinstance(value, dict) else None
    try:
        return int(Decimal(str(raw)))
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return 0


def attr_s(value: str) -> AttributeValue:
    return {"S": value}


def attr_n(value: int) -> AttributeValue:
    return {"N": str(value)}


def attr_l(values: List[AttributeValue]) -> AttributeValue:
    return {"L": values}


def attr_m(values: AttributeMap) -> AttributeValue:
    return {"M": values}
