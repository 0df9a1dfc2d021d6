"""
Response Snapshots

Serialization of response bodies stored for replay.
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Union


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_snapshot(body: Dict[str, Any]) -> str:
    """Serialize a response body exactly as it will be sent and replayed."""
    return json.dumps(
        body,
        ensure_ascii=False,
        allow_nan=False,
        separators=(",", ":"),
        default=_json_default,
    )


@dataclass(frozen=True)
class StoredResponse:
    """A response snapshot as held by the ledger."""

    raw: str

    @property
    def is_well_formed(self) -> bool:
        try:
            json.loads(self.raw)
        except ValueError:
            return False
        return True

    def body(self) -> Union[Dict[str, Any], Any]:
        """
        Parsed snapshot.

        Falls back to the raw stored text when it does not parse, so a
        corrupt row is still replayed rather than failing the request.
        """
        try:
            return json.loads(self.raw)
        except ValueError:
            return self.raw
