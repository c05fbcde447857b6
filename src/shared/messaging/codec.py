"""Wire encoding for cross-service event contracts.

A record value is a JSON object holding the contract's public fields.
Datetimes travel as ISO-8601 strings and enums as their value; the
contract's own field types parse them back on decode.
"""

import json
from datetime import datetime
from enum import Enum

from protean.utils.reflection import declared_fields


def _public_fields(contract) -> list[str]:
    return [name for name in declared_fields(contract) if not name.startswith("_")]


def _primitive(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def to_payload(event) -> dict:
    return {name: _primitive(getattr(event, name, None)) for name in _public_fields(type(event))}


def encode(event) -> str:
    return json.dumps(to_payload(event))


def decode(contract, value: str):
    data = json.loads(value)
    known = set(_public_fields(contract))
    return contract(**{name: item for name, item in data.items() if name in known})
