"""buildor_shared.expressions — Compile sparse payloads into DynamoDB SET updates.

Only the fields present in a payload's document form are written, so a
deployment's ``build`` sub-document can be replaced without touching the
embedded ``project`` snapshot. ``updated_at`` is always stamped first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from buildor_shared.attributes import AttributeMap, attr_s
from buildor_shared.serialization import _now_z

UPDATED_AT = "updated_at"


class SupportsItem(Protocol):
    def as_item(self) -> AttributeMap: ...


@dataclass(frozen=True)
class UpdateExpression:
    names: Dict[str, str]
    values: AttributeMap
    expression: str

    def as_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``dynamodb.update_item``."""
        return {
            "UpdateExpression": self.expression,
            "ExpressionAttributeNames": self.names,
            "ExpressionAttributeValues": self.values,
        }


def compile_update(payload: SupportsItem, timestamp: Optional[str] = None) -> UpdateExpression:
    """Compile ``payload`` into an update expression plus alias tables.

    Each present field ``f`` gets ``#f``/``:f`` aliases and a ``#f = :f``
    clause. An ``updated_at`` field in the payload is superseded by the stamp.
    """
    stamp = timestamp or _now_z()
    names: Dict[str, str] = {f"#{UPDATED_AT}": UPDATED_AT}
    values: AttributeMap = {f":{UPDATED_AT}": attr_s(stamp)}
    clauses = [f"#{UPDATED_AT} = :{UPDATED_AT}"]

    for field_name, value in payload.as_item().items():
        if field_name == UPDATED_AT:
            continue
        names[f"#{field_name}"] = field_name
        values[f":{field_name}"] = value
        clauses.append(f"#{field_name} = :{field_name}")

    return UpdateExpression(names=names, values=values, expression="SET " + ", ".join(clauses))
