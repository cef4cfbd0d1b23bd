from __future__ import annotations

import argparse
import asyncio
import json
import os
import time
from urllib.parse import urlsplit, urlunsplit

import httpx

from snowy import SNOWY_MODELS, GenerateInput, KeypairWallet, SnowyClient, SnowyClientConfig, SnowyError
from snowy.logging import configure_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send one wallet-signed inference request and print the result.")
    parser.add_argument("--url", default="http://localhost:8000/v1/generate")
    parser.add_argument("--model", default="snowy-base", choices=SNOWY_MODELS)
    parser.add_argument("--prompt", default="Why sign inference requests with a wallet?")
    parser.add_argument("--max-tokens", type=int, default=16)
    parser.add_argument("--temperature", type=float, default=0.7)
    parser.add_argument("--timeout-ms", type=float, default=10_000)
    parser.add_argument(
        "--seed-b58",
        default=os.getenv("SNOWY_WALLET_SEED_B58"),
        help="base58 Ed25519 seed; an ephemeral key is generated when omitted",
    )
    parser.add_argument("--wait-seconds", type=float, default=30.0)
    parser.add_argument("--retry-interval", type=float, default=1.0)
    parser.add_argument("--log-level", default="WARNING")
    return parser.parse_args()


def _healthz_url(generate_url: str) -> str:
    parts = urlsplit(generate_url)
    return urlunsplit((parts.scheme, parts.netloc, "/healthz", "", ""))


def wait_for_router_ready(*, generate_url: str, wait_seconds: float, retry_interval: float) -> None:
    health_url = _healthz_url(generate_url)
    deadline = time.time() + wait_seconds
    last_error: str | None = None
    while time.time() < deadline:
        try:
            response = httpx.get(health_url, timeout=3)
            if response.status_code == 200:
                return
            last_error = f"status={response.status_code}"
        except httpx.HTTPError as exc:
            last_error = str(exc)
        time.sleep(retry_interval)
    raise RuntimeError(f"router not ready within {wait_seconds}s ({health_url}, last_error={last_error})")


async def run(args: argparse.Namespace) -> int:
    wallet = KeypairWallet.from_seed_base58(args.seed_b58) if args.seed_b58 else KeypairWallet.generate()
    config = SnowyClientConfig(endpoint=args.url, timeout_ms=args.timeout_ms)
    async with SnowyClient(config) as client:
        try:
            response = await client.generate(
                wallet,
                GenerateInput(
                    model=args.model,
                    prompt=args.prompt,
                    temperature=args.temperature,
                    max_tokens=args.max_tokens,
                ),
            )
        except SnowyError as exc:
            print(json.dumps(exc.to_dict(), default=str, indent=2))
            return 1
    print(json.dumps(response.to_wire(), indent=2))
    return 0


def main() -> int:
    args = parse_args()
    configure_logging(service_name="demo", level=args.log_level)
    wait_for_router_ready(
        generate_url=args.url,
        wait_seconds=args.wait_seconds,
        retry_interval=args.retry_interval,
    )
    return asyncio.run(run(args))


if __name__ == "__main__":
    raise SystemExit(main())
