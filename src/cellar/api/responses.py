"""Success envelope and entity serialisation."""

from datetime import datetime
from enum import Enum

from protean.fields import ValueObject
from protean.utils.reflection import fields


def ok(data=None, **meta) -> dict:
    body = {"success": True, "data": data}
    body.update(meta)
    return body


def _plain(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def serialize(entity, **extra) -> dict:
    """An aggregate as a JSON-ready dict, with computed fields merged in.

    Unset value objects come back as explicit nulls so the payload keeps
    the same keys whatever state the aggregate is in. The optimistic
    locking counter is internal and never leaves the API.
    """
    data = entity.to_dict()
    data.pop("_version", None)
    for name, field in fields(entity).items():
        if isinstance(field, ValueObject):
            data.setdefault(name, None)
    data = _plain(data)
    data.update(_plain(extra))
    return data
