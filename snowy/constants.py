from __future__ import annotations

from typing import Literal, get_args

SnowyModel = Literal["snowy-base", "snowy-meme", "snowy-code"]
SnowyNetwork = Literal["mainnet-beta"]

SNOWY_MODELS: tuple[str, ...] = get_args(SnowyModel)
SNOWY_NETWORKS: tuple[str, ...] = get_args(SnowyNetwork)

SNOWY_PROGRAM_ID = "SNOWy1111111111111111111111111111111111"

PUBLIC_KEY_LENGTH = 32
DIGEST_LENGTH = 32
SIGNATURE_LENGTH = 64

# Largest integer a JSON consumer backed by IEEE-754 doubles reads back exactly.
MAX_SAFE_INTEGER = 2**53 - 1
