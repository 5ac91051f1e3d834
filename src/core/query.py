# src/core/query.py
"""MongoDB-style query matching for the in-process (JSON-backed) backends.

Documents and queries are both in the codec's wire form, so identifiers
compare as their tagged ``oid:`` strings. Supported:

- implicit equality, including membership in array fields
- dotted paths, numeric array indexes and paths through arrays of objects
- field operators: $eq $ne $gt $gte $lt $lte $in $nin $exists $regex
  $options $size $all $elemMatch $not
- logical operators: $and $or $nor

Extended JSON wrappers produced by the codec (``{"$date": ...}``,
``{"$numberLong": ...}``, ...) are values, not operator expressions. Ordering
comparisons only hold between numbers, between strings or between datetimes.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from datetime import datetime
from typing import Any

from docstore.core.codec import deserialize
from docstore.core.errors import EncodingError, UnsupportedQueryError

_MISSING = object()

_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}

_EXTENDED_JSON_KEYS = frozenset({
    "$binary", "$code", "$date", "$maxKey", "$minKey", "$numberDecimal",
    "$numberDouble", "$numberInt", "$numberLong", "$oid", "$regularExpression",
    "$symbol", "$timestamp", "$uuid",
})


def matches(document: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """Return True if the wire-form document satisfies the wire-form query."""
    for key, condition in query.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in _clauses(key, condition)):
                return False
        elif key == "$or":
            if not any(matches(document, sub) for sub in _clauses(key, condition)):
                return False
        elif key == "$nor":
            if any(matches(document, sub) for sub in _clauses(key, condition)):
                return False
        elif key.startswith("$"):
            raise UnsupportedQueryError(f"Unsupported top-level operator: {key}")
        elif not _match_condition(_resolve(document, key.split(".")), condition):
            return False
    return True


def _clauses(operator: str, condition: Any) -> list[Mapping[str, Any]]:
    if not isinstance(condition, list) or not condition:
        raise UnsupportedQueryError(f"{operator} expects a non-empty array")
    return condition


def _resolve(value: Any, parts: list[str]) -> list[Any]:
    """Collect every value reachable by the dotted path (``_MISSING`` if none)."""
    if not parts:
        return [value]
    head, rest = parts[0], parts[1:]
    if isinstance(value, Mapping):
        return _resolve(value[head], rest) if head in value else [_MISSING]
    if isinstance(value, list):
        if head.isdigit():
            index = int(head)
            return _resolve(value[index], rest) if index < len(value) else [_MISSING]
        found: list[Any] = []
        for item in value:
            if isinstance(item, Mapping):
                found.extend(v for v in _resolve(item, parts) if v is not _MISSING)
        return found or [_MISSING]
    return [_MISSING]


def _is_extended_json(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and len(value) == 1
        and next(iter(value)) in _EXTENDED_JSON_KEYS
    )


def _is_operator_expression(condition: Any) -> bool:
    return (
        isinstance(condition, Mapping)
        and bool(condition)
        and not _is_extended_json(condition)
        and all(isinstance(k, str) and k.startswith("$") for k in condition)
    )


def _match_condition(candidates: list[Any], condition: Any) -> bool:
    if _is_operator_expression(condition):
        return all(
            _apply_operator(op, operand, candidates, condition)
            for op, operand in condition.items()
        )
    return any(_equals_or_contains(c, condition) for c in candidates)


def _strict_equals(left: Any, right: Any) -> bool:
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _equals_or_contains(value: Any, expected: Any) -> bool:
    if value is _MISSING:
        return expected is None
    if _strict_equals(value, expected):
        return True
    return isinstance(value, list) and any(_strict_equals(item, expected) for item in value)


def _expanded(candidates: list[Any]) -> Iterator[Any]:
    for value in candidates:
        if isinstance(value, list):
            yield from value
        elif value is not _MISSING:
            yield value


def _ordering_value(value: Any) -> Any:
    """Decode an Extended JSON wrapper so it orders by its native value."""
    if not _is_extended_json(value):
        return value
    try:
        return deserialize(value)
    except EncodingError as e:
        raise UnsupportedQueryError(f"Malformed value in query: {value!r}") from e


def _comparable(left: Any, right: Any) -> bool:
    numbers = (int, float)
    if isinstance(left, datetime) and isinstance(right, datetime):
        return True
    if isinstance(left, bool) or isinstance(right, bool):
        return False
    if isinstance(left, numbers) and isinstance(right, numbers):
        return True
    return isinstance(left, str) and isinstance(right, str)


def _compare(op: str, candidates: list[Any], operand: Any) -> bool:
    operand = _ordering_value(operand)
    for value in _expanded(candidates):
        value = _ordering_value(value)
        if not _comparable(value, operand):
            continue
        if op == "$gt" and value > operand:
            return True
        if op == "$gte" and value >= operand:
            return True
        if op == "$lt" and value < operand:
            return True
        if op == "$lte" and value <= operand:
            return True
    return False


def _regex(condition: Mapping[str, Any]) -> re.Pattern[str]:
    flags = 0
    for letter in condition.get("$options", ""):
        flags |= _REGEX_FLAGS.get(letter, 0)
    return re.compile(condition["$regex"], flags)


def _elem_match(item: Any, operand: Mapping[str, Any]) -> bool:
    if _is_operator_expression(operand):
        return _match_condition([item], operand)
    return isinstance(item, Mapping) and matches(item, operand)


def _apply_operator(
    op: str, operand: Any, candidates: list[Any], condition: Mapping[str, Any]
) -> bool:
    if op == "$eq":
        return any(_equals_or_contains(c, operand) for c in candidates)
    if op == "$ne":
        return not any(_equals_or_contains(c, operand) for c in candidates)
    if op in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(op, candidates, operand)
    if op in ("$in", "$nin"):
        if not isinstance(operand, list):
            raise UnsupportedQueryError(f"{op} expects an array")
        found = any(_equals_or_contains(c, item) for c in candidates for item in operand)
        return found if op == "$in" else not found
    if op == "$exists":
        present = any(c is not _MISSING for c in candidates)
        return present == bool(operand)
    if op == "$regex":
        pattern = _regex(condition)
        return any(isinstance(v, str) and pattern.search(v) for v in _expanded(candidates))
    if op == "$options":
        if "$regex" not in condition:
            raise UnsupportedQueryError("$options requires $regex")
        return True
    if op == "$size":
        return any(isinstance(c, list) and len(c) == operand for c in candidates)
    if op == "$all":
        if not isinstance(operand, list):
            raise UnsupportedQueryError("$all expects an array")
        return any(
            all(_equals_or_contains(c, item) for item in operand) for c in candidates
        )
    if op == "$elemMatch":
        if not isinstance(operand, Mapping):
            raise UnsupportedQueryError("$elemMatch expects an object")
        return any(
            isinstance(c, list) and any(_elem_match(item, operand) for item in c)
            for c in candidates
        )
    if op == "$not":
        if not _is_operator_expression(operand):
            raise UnsupportedQueryError("$not expects an operator expression")
        return not _match_condition(candidates, operand)
    raise UnsupportedQueryError(f"Unsupported query operator: {op}")
