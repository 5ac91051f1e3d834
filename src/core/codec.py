# src/core/codec.py
"""Identifier/value codec between canonical documents and their JSON wire form.

Canonical documents hold ``bson.ObjectId`` identifiers and may carry the
``UNDEFINED`` sentinel. The wire form is plain JSON: identifiers anywhere in
the tree become tagged strings ``oid:<24 hex chars>`` (lowercase hex; tagged
strings supplied by callers are normalized to it) and other BSON types use
relaxed Extended JSON wrappers (``{"$date": ...}``), produced and decoded by
``bson.json_util``.

Round trip: ``deserialize(serialize(doc)) == doc`` for any document without
``UNDEFINED`` values. Datetimes come back timezone-aware (UTC, naive input is
taken as UTC) with millisecond precision.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from datetime import timezone
from typing import Any

from bson import ObjectId, json_util
from bson.errors import InvalidId

from docstore.core.errors import EncodingError
from docstore.core.models import ID_FIELD, Document, ObjectIdLike

OID_PREFIX = "oid:"

_ENCODED_OID_RE = re.compile(r"oid:[0-9a-fA-F]{24}")
_JSON_OPTIONS = json_util.JSONOptions(
    json_mode=json_util.JSONMode.RELAXED, tz_aware=True, tzinfo=timezone.utc
)
_JSON_SCALARS = (str, int, float, bool, type(None))


class _Undefined:
    """Marks a field as explicitly unset (removed from stored documents)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Undefined:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Undefined:
        return self


UNDEFINED = _Undefined()


# --- Identifier helpers ---


def is_encoded_object_id(value: Any) -> bool:
    """True only for strings of the exact form ``oid:`` + 24 hex characters."""
    return isinstance(value, str) and _ENCODED_OID_RE.fullmatch(value) is not None


def encode_object_id(object_id: ObjectIdLike) -> str:
    """Return the tagged wire string for an identifier."""
    return f"{OID_PREFIX}{ensure_object_id(object_id)}"


def decode_object_id(value: str) -> ObjectId:
    """Decode a tagged wire string back into an ObjectId."""
    if not is_encoded_object_id(value):
        raise EncodingError(f"Not an encoded ObjectId: {value!r}")
    return ObjectId(value[len(OID_PREFIX):])


def ensure_object_id(value: ObjectIdLike) -> ObjectId:
    """Normalize an identifier supplied at the API boundary to an ObjectId.

    Accepts an ObjectId, a 24-char hex string or a tagged ``oid:`` string.

    Raises:
        EncodingError: If the value is not a valid identifier.
    """
    if isinstance(value, ObjectId):
        return value
    if is_encoded_object_id(value):
        return ObjectId(value[len(OID_PREFIX):])
    if value is None:
        raise EncodingError("Identifier must not be None")
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        raise EncodingError(f"Invalid identifier: {value!r}") from e


def ensure_obj_has_id(doc: Mapping[str, Any]) -> Document:
    """Return a copy of ``doc`` whose ``_id`` is a populated ObjectId."""
    prepared = dict(doc)
    object_id = prepared.get(ID_FIELD)
    prepared[ID_FIELD] = ObjectId() if not object_id else ensure_object_id(object_id)
    return prepared


# --- Structural normalization ---


def remove_undefined_values(value: Any) -> Any:
    """Drop mapping fields set to UNDEFINED, recursively.

    UNDEFINED items inside arrays keep their position and become None.
    """
    if isinstance(value, Mapping):
        return {
            key: remove_undefined_values(item)
            for key, item in value.items()
            if item is not UNDEFINED
        }
    if isinstance(value, (list, tuple)):
        return [None if item is UNDEFINED else remove_undefined_values(item) for item in value]
    return value


def undefined_to_none(value: Any) -> Any:
    """Replace UNDEFINED with None, recursively (query semantics)."""
    if value is UNDEFINED:
        return None
    if isinstance(value, Mapping):
        return {key: undefined_to_none(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [undefined_to_none(item) for item in value]
    return value


# --- Wire conversion ---


def _to_wire(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return f"{OID_PREFIX}{value}"
    if is_encoded_object_id(value):
        return value.lower()
    if isinstance(value, Mapping):
        wire: dict[str, Any] = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise EncodingError(f"Document keys must be strings, got {key!r}")
            wire[key] = _to_wire(item)
        return wire
    if isinstance(value, (list, tuple)):
        return [_to_wire(item) for item in value]
    if isinstance(value, _JSON_SCALARS):
        return value
    try:
        converted = json_util.default(value, json_options=_JSON_OPTIONS)
    except (TypeError, ValueError) as e:
        raise EncodingError(
            f"Value of type {type(value).__name__} cannot be encoded"
        ) from e
    return _to_wire(converted)


def _from_wire(value: Any) -> Any:
    if isinstance(value, str):
        return decode_object_id(value) if is_encoded_object_id(value) else value
    if isinstance(value, list):
        return [_from_wire(item) for item in value]
    if isinstance(value, dict):
        decoded = {key: _from_wire(item) for key, item in value.items()}
        try:
            return json_util.object_hook(decoded, json_options=_JSON_OPTIONS)
        except (TypeError, ValueError, InvalidId) as e:
            raise EncodingError(f"Malformed extended JSON value: {value!r}") from e
    return value


def serialize(obj: Any, drop_undefined: bool = True) -> Any:
    """Convert a canonical value into its JSON-safe wire form.

    Args:
        obj: Document, query, list or scalar.
        drop_undefined: Pass False when serializing a query, where UNDEFINED
            values matter; they are then replaced with None instead of removed.

    Raises:
        EncodingError: If a value has no JSON representation.
    """
    normalized = remove_undefined_values(obj) if drop_undefined else undefined_to_none(obj)
    return _to_wire(normalized)


def deserialize(obj: Any) -> Any:
    """Inverse of serialize: restore ObjectIds and Extended JSON values."""
    return _from_wire(obj)
