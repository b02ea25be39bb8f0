"""
Contracts Module
================

Calldata encoders for the verifier contracts a proof can be sent to.

- evm: Solidity Groth16 verifiers (G2 coordinates reversed, ABI words)
- ledger: ledger-runtime (Soroban-style) verifiers (hex leaves, CLI invocation)
- targets: the tagged union selecting one of them

Usage:
    from zkbridge.contracts import EVMContract, LedgerContract

    calldata = EVMContract("0x...").get_calldata(proof, public_signals)
    command = LedgerContract("C...").build_cli_command(proof, public_signals)
"""

from zkbridge.contracts.evm import (
    EVMCalldata,
    EVMContract,
    format_proof_for_evm,
    get_calldata,
)
from zkbridge.contracts.ledger import (
    CalldataGeneration,
    LedgerCalldata,
    LedgerContract,
    build_cli_command,
    decode_ledger_calldata,
    format_proof_for_ledger,
    normalize_ledger_calldata,
    proof_to_hex,
)
from zkbridge.contracts.targets import (
    ChainKind,
    ChainTarget,
    EVMTarget,
    LedgerTarget,
    parse_chain_target,
)

__all__ = [
    # EVM
    "EVMCalldata",
    "EVMContract",
    "format_proof_for_evm",
    "get_calldata",
    # Ledger
    "CalldataGeneration",
    "LedgerCalldata",
    "LedgerContract",
    "build_cli_command",
    "decode_ledger_calldata",
    "format_proof_for_ledger",
    "normalize_ledger_calldata",
    "proof_to_hex",
    # Targets
    "ChainKind",
    "ChainTarget",
    "EVMTarget",
    "LedgerTarget",
    "parse_chain_target",
]
