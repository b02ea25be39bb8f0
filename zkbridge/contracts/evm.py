"""
EVM Verifier Encoding
=====================

Encodes canonical proofs for Solidity Groth16 verifier contracts.

The pairing precompile expects each G2 coordinate as ``(c1, c0)``; the
canonical model stores ``(c0, c1)``. Every EVM-facing encoding therefore
reverses the pair on both G2 axes. Without the swap the output is still made
of valid field elements, but the pairing check fails.

Version: 0.1.0
"""

import json
import re
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from zkbridge.errors import ConfigurationError, ShapeError
from zkbridge.zk.field import FieldLike, encode, to_decimal, to_hex
from zkbridge.zk.models import G2Point, Proof, PublicSignals


VERIFY_PROOF_SIGNATURE = "verifyProof(uint256[2],uint256[2][2],uint256[2],uint256[])"

GROTH16_VERIFIER_ABI: list[dict[str, Any]] = [
    {
        "name": "verifyProof",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "_pA", "type": "uint256[2]", "internalType": "uint256[2]"},
            {"name": "_pB", "type": "uint256[2][2]", "internalType": "uint256[2][2]"},
            {"name": "_pC", "type": "uint256[2]", "internalType": "uint256[2]"},
            {"name": "_pubSignals", "type": "uint256[]", "internalType": "uint256[]"},
        ],
        "outputs": [{"name": "", "type": "bool", "internalType": "bool"}],
    }
]

SUPPORTED_NETWORKS: dict[str, dict[str, Any]] = {
    "ethereum": {"chainId": 1, "rpcUrl": "https://cloudflare-eth.com"},
    "sepolia": {"chainId": 11155111, "rpcUrl": "https://rpc.sepolia.org"},
    "polygon": {"chainId": 137, "rpcUrl": "https://polygon-rpc.com"},
    "amoy": {"chainId": 80002, "rpcUrl": "https://rpc-amoy.polygon.technology"},
    "arbitrum": {"chainId": 42161, "rpcUrl": "https://arb1.arbitrum.io/rpc"},
    "optimism": {"chainId": 10, "rpcUrl": "https://mainnet.optimism.io"},
    "base": {"chainId": 8453, "rpcUrl": "https://mainnet.base.org"},
}

_ADDRESS_RE = re.compile(r"0x[0-9a-fA-F]{40}")


class EVMCalldata(BaseModel):
    """Calldata for a ``verifyProof`` call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    to: str
    function_signature: str = Field(default=VERIFY_PROOF_SIGNATURE, alias="functionSignature")
    data: str


def is_valid_evm_address(address: str) -> bool:
    """Check for a 20-byte ``0x``-prefixed hex address."""
    return isinstance(address, str) and _ADDRESS_RE.fullmatch(address) is not None


def _swapped_g2(point: G2Point) -> tuple[tuple[int, int], tuple[int, int]]:
    return (point.x[1], point.x[0]), (point.y[1], point.y[0])


def format_proof_for_evm(proof: Proof | dict[str, Any]) -> dict[str, Any]:
    """
    Arrange a proof as the ``a``, ``b``, ``c`` arguments of ``verifyProof``.

    Returns decimal strings: ``{"a": [x, y], "b": [[x1, x0], [y1, y0]], "c": [x, y]}``.
    """
    proof = Proof.parse(proof)
    bx, by = _swapped_g2(proof.pi_b)
    return {
        "a": proof.pi_a.to_decimal(),
        "b": [[to_decimal(bx[0]), to_decimal(bx[1])], [to_decimal(by[0]), to_decimal(by[1])]],
        "c": proof.pi_c.to_decimal(),
    }


def encode_verify_args(
    proof: Proof | dict[str, Any],
    public_signals: PublicSignals | Sequence[FieldLike],
) -> bytes:
    """
    Encode the four ``verifyProof`` arguments as consecutive 32-byte words.

    Layout: ``a.x, a.y, b.x1, b.x0, b.y1, b.y0, c.x, c.y`` then each public
    signal in order. No offsets or length prefixes are emitted.
    """
    proof = Proof.parse(proof)
    signals = PublicSignals.parse(public_signals)
    bx, by = _swapped_g2(proof.pi_b)

    words: list[int] = [
        proof.pi_a.x,
        proof.pi_a.y,
        bx[0],
        bx[1],
        by[0],
        by[1],
        proof.pi_c.x,
        proof.pi_c.y,
        *signals.values,
    ]
    return b"".join(encode(w) for w in words)


def get_calldata(
    proof: Proof | dict[str, Any],
    public_signals: PublicSignals | Sequence[FieldLike],
    contract_address: str,
) -> EVMCalldata:
    """
    Build ``verifyProof`` calldata for a verifier contract.

    Raises:
        ConfigurationError: If the contract address is missing or malformed
    """
    if not contract_address:
        raise ConfigurationError("contractAddress")
    if not is_valid_evm_address(contract_address):
        raise ConfigurationError(
            "contractAddress", f"contractAddress is not a valid EVM address: {contract_address!r}"
        )

    data = encode_verify_args(proof, public_signals)
    return EVMCalldata(to=contract_address, data="0x" + data.hex())


def export_solidity_calldata(
    proof: Proof | dict[str, Any],
    public_signals: PublicSignals | Sequence[FieldLike],
) -> str:
    """
    Render calldata in the text form printed by ``snarkjs zkey export soliditycalldata``.

    Example output (shortened):
        ["0x..", "0x.."],[["0x..", "0x.."],["0x..", "0x.."]],["0x..", "0x.."],["0x.."]
    """
    proof = Proof.parse(proof)
    signals = PublicSignals.parse(public_signals)
    bx, by = _swapped_g2(proof.pi_b)

    parts = [
        [to_hex(proof.pi_a.x), to_hex(proof.pi_a.y)],
        [[to_hex(bx[0]), to_hex(bx[1])], [to_hex(by[0]), to_hex(by[1])]],
        [to_hex(proof.pi_c.x), to_hex(proof.pi_c.y)],
        signals.to_hex(),
    ]
    return ",".join(json.dumps(p) for p in parts)


def parse_solidity_calldata(text: str) -> dict[str, Any]:
    """
    Split snarkjs Solidity calldata text into its ``a``, ``b``, ``c``, ``input`` arguments.

    Values are returned as they appear; ``b`` keeps the EVM (swapped) order.

    Raises:
        ShapeError: If the text is not four comma-separated JSON arrays of the
            expected shapes
    """
    try:
        parts = json.loads(f"[{text}]")
    except json.JSONDecodeError as e:
        raise ShapeError(f"Malformed Solidity calldata: {e.msg}") from e

    if len(parts) != 4:
        raise ShapeError(f"Solidity calldata must have 4 arguments, got {len(parts)}")

    a, b, c, inputs = parts
    if not (isinstance(a, list) and len(a) == 2):
        raise ShapeError("Solidity calldata argument a must have 2 elements")
    if not (
        isinstance(b, list)
        and len(b) == 2
        and all(isinstance(row, list) and len(row) == 2 for row in b)
    ):
        raise ShapeError("Solidity calldata argument b must be 2x2")
    if not (isinstance(c, list) and len(c) == 2):
        raise ShapeError("Solidity calldata argument c must have 2 elements")
    if not isinstance(inputs, list):
        raise ShapeError("Solidity calldata argument input must be a list")

    return {"a": a, "b": b, "c": c, "input": inputs}


def proof_from_solidity_calldata(text: str) -> tuple[Proof, PublicSignals]:
    """Rebuild the canonical proof and signals from snarkjs Solidity calldata text."""
    parsed = parse_solidity_calldata(text)
    b = parsed["b"]
    proof = Proof(
        pi_a=parsed["a"],
        pi_b=G2Point(x=(b[0][1], b[0][0]), y=(b[1][1], b[1][0])),
        pi_c=parsed["c"],
    )
    return proof, PublicSignals(values=parsed["input"])


class EVMContract:
    """
    Encoder facade bound to one Solidity verifier deployment.

    Usage:
        contract = EVMContract("0x1234...7890", network="polygon")
        calldata = contract.get_calldata(proof, public_signals)
    """

    def __init__(self, contract_address: str, network: str = "ethereum") -> None:
        if not contract_address:
            raise ConfigurationError("contractAddress")
        if not is_valid_evm_address(contract_address):
            raise ConfigurationError(
                "contractAddress", f"contractAddress is not a valid EVM address: {contract_address!r}"
            )
        self._contract_address = contract_address
        self._network = network

    @property
    def contract_address(self) -> str:
        return self._contract_address

    @property
    def network(self) -> str:
        return self._network

    @property
    def chain_id(self) -> int | None:
        """Chain ID of the configured network, if it is a known one."""
        info = SUPPORTED_NETWORKS.get(self._network)
        return info["chainId"] if info else None

    def format_proof(self, proof: Proof | dict[str, Any]) -> dict[str, Any]:
        return format_proof_for_evm(proof)

    def get_calldata(
        self,
        proof: Proof | dict[str, Any],
        public_signals: PublicSignals | Sequence[FieldLike],
    ) -> EVMCalldata:
        return get_calldata(proof, public_signals, self._contract_address)

    @staticmethod
    def get_abi() -> list[dict[str, Any]]:
        return [dict(entry) for entry in GROTH16_VERIFIER_ABI]

    @staticmethod
    def supported_networks() -> dict[str, dict[str, Any]]:
        return {name: dict(info) for name, info in SUPPORTED_NETWORKS.items()}
