from __future__ import annotations

import asyncio
import hashlib
from dataclasses import dataclass

_MAX_COMPLETION_TOKENS = 512

_VOCAB = {
    "snowy-base": ["snow", "frost", "drift", "flake", "powder", "glacier", "ice", "winter"],
    "snowy-meme": ["wen", "moon", "ser", "gm", "wagmi", "based", "pump", "lfg"],
    "snowy-code": ["def", "return", "async", "await", "class", "yield", "import", "lambda"],
}


@dataclass(frozen=True)
class Completion:
    text: str
    prompt_tokens: int
    completion_tokens: int

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class MockInferenceBackend:
    """Deterministic stand-in for the model behind the router."""

    def __init__(self, *, token_delay_seconds: float = 0.0) -> None:
        self._token_delay_seconds = token_delay_seconds

    async def complete(self, *, model: str, prompt: str, max_tokens: int, temperature: float) -> Completion:
        count = min(max(max_tokens, 0), _MAX_COMPLETION_TOKENS)
        tokens = [self._build_token(model, prompt, index, temperature) for index in range(count)]
        if self._token_delay_seconds:
            await asyncio.sleep(self._token_delay_seconds * len(tokens))
        return Completion(
            text=" ".join(tokens),
            prompt_tokens=len(prompt.split()),
            completion_tokens=len(tokens),
        )

    def _build_token(self, model: str, prompt: str, index: int, temperature: float) -> str:
        vocab = _VOCAB[model]
        seed = int(hashlib.sha256(prompt.encode("utf-8")).hexdigest(), 16)
        token = vocab[(seed + index) % len(vocab)]
        if temperature > 1.2 and index % 4 == 0:
            token = token.upper()
        return token
