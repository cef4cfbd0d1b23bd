from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorCategory(str, Enum):
    INPUT = "input"
    CONFIG = "config"
    SIGNING = "signing"
    TRANSPORT = "transport"
    INTEGRITY = "integrity"


class ErrorKind(str, Enum):
    INVALID_INPUT = "invalid_input"
    INVALID_SIGNER = "invalid_signer"
    NON_CANONICAL_VALUE = "non_canonical_value"
    UNSUPPORTED_VALUE = "unsupported_value"
    INVALID_CONFIG = "invalid_config"
    INVALID_SIGNATURE_LENGTH = "invalid_signature_length"
    SIGNING_FAILED = "signing_failed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    NETWORK_FAILURE = "network_failure"
    HTTP_ERROR = "http_error"
    EMPTY_RESPONSE = "empty_response"
    MALFORMED_RESPONSE = "malformed_response"
    INVALID_RESPONSE_SHAPE = "invalid_response_shape"
    VERIFICATION_MISMATCH = "verification_mismatch"
    REQUEST_VERIFICATION_FAILED = "request_verification_failed"


class SnowyError(Exception):
    """Base class for every failure raised by the SDK.

    ``kind`` and ``category`` are fixed per subclass so callers can branch on
    them without matching message text. ``details()`` returns the structured
    payload of the error.
    """

    kind: ClassVar[ErrorKind]
    category: ClassVar[ErrorCategory]

    def __init__(self, message: str) -> None:
        super().__init__(f"Snowy SDK: {message}")
        self.message = message

    def details(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, **self.details()}


# Input validation


class InvalidInputError(SnowyError):
    kind = ErrorKind.INVALID_INPUT
    category = ErrorCategory.INPUT

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"{field} {reason}")
        self.field = field
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "reason": self.reason}


class InvalidSignerError(SnowyError):
    kind = ErrorKind.INVALID_SIGNER
    category = ErrorCategory.INPUT

    def __init__(self, reason: str, *, decoded_length: int | None = None) -> None:
        super().__init__(f"wallet public key {reason}")
        self.reason = reason
        self.decoded_length = decoded_length

    def details(self) -> dict[str, Any]:
        return {"reason": self.reason, "decoded_length": self.decoded_length}


class NonCanonicalValueError(SnowyError):
    kind = ErrorKind.NON_CANONICAL_VALUE
    category = ErrorCategory.INPUT

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"value at {path} is not canonical: {reason}")
        self.path = path
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"path": self.path, "reason": self.reason}


class UnsupportedValueError(SnowyError):
    kind = ErrorKind.UNSUPPORTED_VALUE
    category = ErrorCategory.INPUT

    def __init__(self, path: str, type_name: str) -> None:
        super().__init__(f"unsupported value type for hashing at {path}: {type_name}")
        self.path = path
        self.type_name = type_name

    def details(self) -> dict[str, Any]:
        return {"path": self.path, "type_name": self.type_name}


class InvalidConfigError(SnowyError):
    kind = ErrorKind.INVALID_CONFIG
    category = ErrorCategory.CONFIG

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"config {field} {reason}")
        self.field = field
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "reason": self.reason}


# Signing


class InvalidSignatureLengthError(SnowyError):
    kind = ErrorKind.INVALID_SIGNATURE_LENGTH
    category = ErrorCategory.SIGNING

    def __init__(self, length: int) -> None:
        super().__init__(f"signature must be 64 bytes (got {length})")
        self.length = length

    def details(self) -> dict[str, Any]:
        return {"length": self.length}


class SigningFailedError(SnowyError):
    kind = ErrorKind.SIGNING_FAILED
    category = ErrorCategory.SIGNING

    def __init__(self, reason: str, *, cause: BaseException | None = None) -> None:
        super().__init__(f"wallet signing failed: {reason}")
        self.reason = reason
        self.cause = cause

    def details(self) -> dict[str, Any]:
        return {"reason": self.reason, "cause": repr(self.cause) if self.cause else None}


# Transport


class RequestTimeoutError(SnowyError):
    kind = ErrorKind.TIMEOUT
    category = ErrorCategory.TRANSPORT

    def __init__(self, timeout_ms: float | None) -> None:
        super().__init__(f"request timeout after {timeout_ms}ms")
        self.timeout_ms = timeout_ms

    def details(self) -> dict[str, Any]:
        return {"timeout_ms": self.timeout_ms}


class RequestCancelledError(SnowyError):
    kind = ErrorKind.CANCELLED
    category = ErrorCategory.TRANSPORT

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(f"request cancelled ({reason})" if reason else "request cancelled")
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"reason": self.reason}


class NetworkFailureError(SnowyError):
    kind = ErrorKind.NETWORK_FAILURE
    category = ErrorCategory.TRANSPORT

    def __init__(self, url: str, cause: BaseException) -> None:
        super().__init__(f"network or fetch failure for {url}: {cause}")
        self.url = url
        self.cause = cause

    def details(self) -> dict[str, Any]:
        return {"url": self.url, "cause": repr(self.cause)}


class SnowyHttpError(SnowyError):
    kind = ErrorKind.HTTP_ERROR
    category = ErrorCategory.TRANSPORT

    def __init__(self, *, status: int, status_text: str, url: str, body_text: str) -> None:
        super().__init__(f"HTTP {status} {status_text}".rstrip())
        self.status = status
        self.status_text = status_text
        self.url = url
        self.body_text = body_text

    def details(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "status_text": self.status_text,
            "url": self.url,
            "body_text": self.body_text,
        }


# Response integrity


class EmptyResponseError(SnowyError):
    kind = ErrorKind.EMPTY_RESPONSE
    category = ErrorCategory.INTEGRITY

    def __init__(self, url: str) -> None:
        super().__init__("empty JSON response body")
        self.url = url

    def details(self) -> dict[str, Any]:
        return {"url": self.url}


class MalformedResponseError(SnowyError):
    kind = ErrorKind.MALFORMED_RESPONSE
    category = ErrorCategory.INTEGRITY

    def __init__(self, url: str, body_text: str, cause: BaseException) -> None:
        super().__init__(f"failed to parse JSON response: {cause}")
        self.url = url
        self.body_text = body_text
        self.cause = cause

    def details(self) -> dict[str, Any]:
        return {"url": self.url, "body_text": self.body_text}


class InvalidResponseShapeError(SnowyError):
    kind = ErrorKind.INVALID_RESPONSE_SHAPE
    category = ErrorCategory.INTEGRITY

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"response.{field} {reason}" if field != "response" else f"response {reason}")
        self.field = field
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "reason": self.reason}


class VerificationMismatchError(SnowyError):
    kind = ErrorKind.VERIFICATION_MISMATCH
    category = ErrorCategory.INTEGRITY

    def __init__(self, field: str, *, expected: str, actual: str) -> None:
        super().__init__(f"response verification.{field} mismatch")
        self.field = field
        self.expected = expected
        self.actual = actual

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "expected": self.expected, "actual": self.actual}


class RequestVerificationError(SnowyError):
    """Raised on the router side when a signed request does not check out."""

    kind = ErrorKind.REQUEST_VERIFICATION_FAILED
    category = ErrorCategory.INTEGRITY

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"signed request {field} {reason}")
        self.field = field
        self.reason = reason

    def details(self) -> dict[str, Any]:
        return {"field": self.field, "reason": self.reason}
