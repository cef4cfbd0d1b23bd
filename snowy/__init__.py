from snowy.canonical import canonical_bytes, canonical_dumps
from snowy.cancellation import CancelToken
from snowy.client import SnowyClient
from snowy.config import SnowyClientConfig, load_client_config
from snowy.constants import SNOWY_MODELS, SNOWY_PROGRAM_ID, SnowyModel, SnowyNetwork
from snowy.errors import (
    EmptyResponseError,
    ErrorCategory,
    ErrorKind,
    InvalidConfigError,
    InvalidInputError,
    InvalidResponseShapeError,
    InvalidSignatureLengthError,
    InvalidSignerError,
    MalformedResponseError,
    NetworkFailureError,
    NonCanonicalValueError,
    RequestCancelledError,
    RequestTimeoutError,
    RequestVerificationError,
    SigningFailedError,
    SnowyError,
    SnowyHttpError,
    UnsupportedValueError,
    VerificationMismatchError,
)
from snowy.hashing import HashProvider, RequestDigest, Sha256Provider, hash_canonical, sha256, sha256_base58
from snowy.protocol import build_signed_request, validate_generate_input, verify_signed_request
from snowy.schemas import (
    GenerateInput,
    GenerateResponse,
    HashableRequest,
    SignedRequest,
    Usage,
    Verification,
)
from snowy.signer import WalletIdentity, ensure_base58_public_key, sign_digest
from snowy.transport import Transport
from snowy.verification import verify_generate_response
from snowy.wallets import KeypairWallet

__version__ = "0.1.0"

__all__ = [
    "CancelToken",
    "EmptyResponseError",
    "ErrorCategory",
    "ErrorKind",
    "GenerateInput",
    "GenerateResponse",
    "HashProvider",
    "HashableRequest",
    "InvalidConfigError",
    "InvalidInputError",
    "InvalidResponseShapeError",
    "InvalidSignatureLengthError",
    "InvalidSignerError",
    "KeypairWallet",
    "MalformedResponseError",
    "NetworkFailureError",
    "NonCanonicalValueError",
    "RequestCancelledError",
    "RequestDigest",
    "RequestTimeoutError",
    "RequestVerificationError",
    "SNOWY_MODELS",
    "SNOWY_PROGRAM_ID",
    "Sha256Provider",
    "SignedRequest",
    "SigningFailedError",
    "SnowyClient",
    "SnowyClientConfig",
    "SnowyError",
    "SnowyHttpError",
    "SnowyModel",
    "SnowyNetwork",
    "Transport",
    "UnsupportedValueError",
    "Usage",
    "Verification",
    "VerificationMismatchError",
    "WalletIdentity",
    "build_signed_request",
    "canonical_bytes",
    "canonical_dumps",
    "ensure_base58_public_key",
    "hash_canonical",
    "load_client_config",
    "sha256",
    "sha256_base58",
    "sign_digest",
    "validate_generate_input",
    "verify_generate_response",
    "verify_signed_request",
]
