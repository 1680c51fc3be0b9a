"""buildor_shared.serialization — DynamoDB serialization and timestamp helpers."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from boto3.dynamodb.types import TypeSerializer

_SER = TypeSerializer()


def _serialize(value: Any) -> Dict[str, Any]:
    """Serialize a Python value for DynamoDB."""
    if isinstance(value, float):
        value = Decimal(str(value))
    return _SER.serialize(value)


def _now_z() -> str:
    """Current UTC timestamp in ISO 8601 format with Z suffix."""
    return dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _epoch_millis(value: Optional[Union[dt.datetime, int, float]]) -> Optional[int]:
    """Convert a datetime (naive = UTC) or epoch seconds to epoch milliseconds."""
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=dt.timezone.utc)
        return int(value.timestamp() * 1000)
    return int(float(value) * 1000)
