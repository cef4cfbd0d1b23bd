"""Deterministic JSON encoding for content-addressed request hashing.

The output is byte-identical to JavaScript's ``JSON.stringify`` applied to a
copy of the value with every object's keys sorted, so hashes computed here
match hashes computed by any other SNOWY client or router.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from dataclasses import MISSING
from decimal import Decimal
from typing import Any

from snowy.constants import MAX_SAFE_INTEGER
from snowy.errors import NonCanonicalValueError, UnsupportedValueError

_BINARY_TYPES = (bytes, bytearray, memoryview)


def canonical_dumps(value: Any) -> str:
    """Return the canonical JSON text of ``value``: sorted keys, no whitespace."""
    return _encode(value, "$")


def canonical_bytes(value: Any) -> bytes:
    """Return the canonical JSON of ``value`` as UTF-8 bytes."""
    return canonical_dumps(value).encode("utf-8")


def _encode(value: Any, path: str) -> str:
    if value is MISSING:
        raise NonCanonicalValueError(path, "absent values are not allowed in hashed payloads")
    if value is None:
        return "null"
    # bool before int: True is an int in Python.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_number(value, path)
    if isinstance(value, str):
        return _encode_string(value, path)
    if isinstance(value, _BINARY_TYPES):
        raise NonCanonicalValueError(
            path,
            "binary data has no canonical JSON form; encode to base58/base64 text before hashing",
        )
    if isinstance(value, Mapping):
        return _encode_mapping(value, path)
    if isinstance(value, (list, tuple)):
        items = [_encode(item, f"{path}[{index}]") for index, item in enumerate(value)]
        return "[" + ",".join(items) + "]"
    raise UnsupportedValueError(path, type(value).__name__)


def _encode_mapping(value: Mapping[Any, Any], path: str) -> str:
    keyed: list[tuple[bytes, str]] = []
    for key in value.keys():
        if not isinstance(key, str):
            raise UnsupportedValueError(f"{path}.{key!r}", f"{type(key).__name__} key")
        keyed.append((_utf8(key, f"{path}.{key}"), key))
    keyed.sort()

    members = []
    for _, key in keyed:
        member_path = f"{path}.{key}"
        members.append(f"{_encode_string(key, member_path)}:{_encode(value[key], member_path)}")
    return "{" + ",".join(members) + "}"


def _encode_string(text: str, path: str) -> str:
    _utf8(text, path)
    return json.dumps(text, ensure_ascii=False)


def _utf8(text: str, path: str) -> bytes:
    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise NonCanonicalValueError(path, "text contains a lone surrogate") from exc


def _format_number(value: int | float, path: str) -> str:
    if isinstance(value, int):
        if abs(value) > MAX_SAFE_INTEGER:
            raise NonCanonicalValueError(path, "integer is outside the exactly representable range")
        return str(value)
    if not math.isfinite(value):
        raise NonCanonicalValueError(path, "numbers must be finite for deterministic hashing")
    if value == 0:
        return "0"
    if value < 0:
        return "-" + _format_positive_float(-value)
    return _format_positive_float(value)


def _format_positive_float(value: float) -> str:
    # ECMAScript Number::toString over the shortest round-trip digits, which
    # Python's repr also produces.
    _, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    stripped = digits.rstrip("0")
    exponent += len(digits) - len(stripped)
    digits = stripped

    k = len(digits)
    n = exponent + k
    if k <= n <= 21:
        return digits + "0" * (n - k)
    if 0 < n <= 21:
        return f"{digits[:n]}.{digits[n:]}"
    if -6 < n <= 0:
        return "0." + "0" * -n + digits

    e = n - 1
    suffix = f"e{'+' if e >= 0 else '-'}{abs(e)}"
    if k == 1:
        return digits + suffix
    return f"{digits[0]}.{digits[1:]}{suffix}"
