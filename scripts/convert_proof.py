#!/usr/bin/env python3
"""
Proof Conversion Script
=======================

Converts a snarkjs proof (and optionally its verification key) into the
argument encodings verifier contracts expect.

Usage:
    python scripts/convert_proof.py ledger proof.json public.json [--vkey verification_key.json]
    python scripts/convert_proof.py evm proof.json public.json [--contract-address 0x...]
    python scripts/convert_proof.py solidity proof.json public.json
    python scripts/convert_proof.py cli proof.json public.json [--contract-id C...] [--network testnet]
    python scripts/convert_proof.py normalize calldata.json

Contract identifiers and networks not given on the command line are read from
ZKBRIDGE_EVM_* / ZKBRIDGE_LEDGER_* settings.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from zkbridge.config import get_settings
from zkbridge.contracts import evm, ledger
from zkbridge.errors import ZKBridgeError
from zkbridge.logging import get_logger, setup_logging
from zkbridge.zk.models import Proof, PublicSignals, VerifyingKey


logger = get_logger(__name__)


def load_json(path: str) -> Any:
    with open(path) as f:
        return json.load(f)


def load_proof(args: argparse.Namespace) -> tuple[Proof, PublicSignals]:
    proof = Proof.from_snarkjs(load_json(args.proof))
    signals = PublicSignals(values=load_json(args.public))
    return proof, signals


def convert(args: argparse.Namespace) -> Any:
    """Run one conversion and return its JSON-serializable or text output."""
    settings = get_settings()

    if args.format == "normalize":
        return ledger.normalize_ledger_calldata(load_json(args.proof))

    proof, signals = load_proof(args)

    if args.format == "ledger":
        vkey = VerifyingKey.from_json(load_json(args.vkey)) if args.vkey else None
        return ledger.encode_verify_args(proof, signals, vkey)

    if args.format == "evm":
        address = args.contract_address or settings.evm.contract_address
        return evm.get_calldata(proof, signals, address).model_dump(by_alias=True)

    if args.format == "solidity":
        return evm.export_solidity_calldata(proof, signals)

    # cli
    return ledger.build_cli_command(
        args.contract_id or settings.ledger.contract_id,
        args.network or settings.ledger.network,
        proof,
        signals,
        tool=settings.ledger.cli_tool,
        source=args.source or settings.ledger_source(),
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Convert Groth16 proofs for verifier contracts")
    parser.add_argument("format", choices=["ledger", "evm", "solidity", "cli", "normalize"],
                        help="Output encoding")
    parser.add_argument("proof", help="snarkjs proof JSON (or calldata JSON for 'normalize')")
    parser.add_argument("public", nargs="?", help="Public signals JSON")
    parser.add_argument("--vkey", help="Verification key JSON to embed (ledger)")
    parser.add_argument("--contract-address", help="EVM verifier contract address")
    parser.add_argument("--contract-id", help="Ledger verifier contract ID")
    parser.add_argument("--network", help="Ledger network name")
    parser.add_argument("--source", help="Ledger source account for the CLI command")
    parser.add_argument("--output", "-o", help="Write output to this file instead of stdout")

    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.log_level.value, settings.json_logs)

    if args.format != "normalize" and not args.public:
        parser.error(f"'{args.format}' needs a public signals file")

    try:
        result = convert(args)
    except (ZKBridgeError, OSError, json.JSONDecodeError) as e:
        logger.error("proof_conversion_failed", format=args.format, error=str(e))
        print(f"✗ {e}", file=sys.stderr)
        return 1

    text = result if isinstance(result, str) else json.dumps(result, indent=2)

    if args.output:
        Path(args.output).write_text(text + "\n")
        print(f"✓ Wrote {args.format} output to {args.output}")
    else:
        print(text)

    return 0


if __name__ == "__main__":
    sys.exit(main())
