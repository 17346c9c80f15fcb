"""Off-chain proposer tooling.

Usage examples:
    quorumdao digest --org 0x... --target 0x... --payload 0x40c10f19... --nonce 0 --timestamp 1700000000
    quorumdao encode-call "mint(address,uint256)" 0xabc... 1
    quorumdao batch-digest --org 0x... --call 0xT1:0x...:0 --call 0xT2:0x...:0 --future-nonce 3
    quorumdao sign --digest 0x... --key 0x...
    quorumdao recover --digest 0x... --signature 0x...

Digests and signatures are printed as 0x-prefixed hex.
"""

from __future__ import annotations

from typing import Optional, Sequence
import argparse
import json
import logging
import sys

from web3 import Web3

from .chain.abi import coerce_arguments, encode_call
from .core.config import get_settings
from .crypto.digest import compute_batch_digest, compute_digest
from .crypto.signatures import recover_signer, sign_digest
from .errors import QuorumDaoError
from .logger import configure_logging
from .types import CallSpec

LOGGER = logging.getLogger(__name__)


def _hex_bytes(text: str) -> bytes:
    try:
        return bytes(Web3.to_bytes(hexstr=text)) if text else b""
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not valid hex: {text!r}") from exc


def _digest(text: str) -> bytes:
    value = _hex_bytes(text)
    if len(value) != 32:
        raise argparse.ArgumentTypeError(f"digest must be 32 bytes, got {len(value)}")
    return value


def _call(text: str) -> CallSpec:
    """Parse ``TARGET:PAYLOAD:VALUE`` (payload may be empty)."""
    parts = text.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected TARGET:PAYLOAD:VALUE, got {text!r}")
    target, payload, value = parts
    try:
        return CallSpec(target=target, payload=_hex_bytes(payload), value=int(value, 0))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns:
        Configured parser with one subcommand per operation.
    """
    parser = argparse.ArgumentParser(prog="quorumdao", description="Quorum-governed execution tooling.")
    parser.add_argument("--log-level", dest="log_level", default=None, help="Override QUORUMDAO_LOG_LEVEL")
    parser.add_argument("--chain-id", dest="chain_id", type=int, default=None,
                        help="Chain id for digests (default: settings.chain_id)")
    sub = parser.add_subparsers(dest="command", required=True)

    digest = sub.add_parser("digest", help="Compute a single-intent digest")
    digest.add_argument("--org", required=True)
    digest.add_argument("--target", required=True)
    digest.add_argument("--payload", type=_hex_bytes, default=b"")
    digest.add_argument("--value", type=lambda s: int(s, 0), default=0)
    digest.add_argument("--nonce", type=int, required=True)
    digest.add_argument("--timestamp", type=int, required=True)

    batch = sub.add_parser("batch-digest", help="Compute a batch digest")
    batch.add_argument("--org", required=True)
    batch.add_argument("--call", dest="calls", type=_call, action="append", required=True,
                       help="TARGET:PAYLOAD:VALUE, repeat in execution order")
    batch.add_argument("--future-nonce", dest="future_nonce", type=int, required=True)

    encode = sub.add_parser("encode-call", help="ABI-encode call data")
    encode.add_argument("signature", help='e.g. "mint(address,uint256)"')
    encode.add_argument("args", nargs="*")

    sign = sub.add_parser("sign", help="Sign a digest with the EIP-191 personal message prefix")
    sign.add_argument("--digest", type=_digest, required=True)
    sign.add_argument("--key", default=None, help="Private key (default: QUORUMDAO_PROPOSER_PRIVATE_KEY)")

    recover = sub.add_parser("recover", help="Recover the signer of a digest")
    recover.add_argument("--digest", type=_digest, required=True)
    recover.add_argument("--signature", required=True)

    return parser


def run(args: argparse.Namespace) -> str:
    """Execute the selected subcommand and return its output."""
    settings = get_settings()
    chain_id = args.chain_id if args.chain_id is not None else settings.chain_id

    if args.command == "digest":
        digest = compute_digest(args.org, args.target, args.payload, args.value, args.nonce,
                                args.timestamp, chain_id=chain_id)
        return "0x" + digest.hex()
    if args.command == "batch-digest":
        digest = compute_batch_digest(args.org, args.calls, args.future_nonce, chain_id=chain_id)
        return "0x" + digest.hex()
    if args.command == "encode-call":
        values = coerce_arguments(args.signature, args.args)
        return "0x" + encode_call(args.signature, *values).hex()
    if args.command == "sign":
        key = args.key or settings.proposer_private_key
        if not key:
            raise ValueError("no private key: pass --key or set QUORUMDAO_PROPOSER_PRIVATE_KEY")
        return sign_digest(args.digest, key).hex()
    if args.command == "recover":
        return json.dumps({"signer": recover_signer(args.digest, args.signature)})
    raise ValueError(f"unknown command {args.command}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entrypoint for the ``quorumdao`` console script."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    settings = get_settings()
    if args.log_level:
        settings = settings.model_copy(update={"log_level": args.log_level})
    configure_logging(settings)

    try:
        output = run(args)
    except (QuorumDaoError, ValueError) as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
