"""
Ledger-Contract Verifier Encoding
=================================

Encodes canonical proofs for the Groth16 verifier deployed on the ledger
(Soroban-style) contract runtime.

Unlike the EVM encoding, G2 coordinates keep the canonical ``(c0, c1)`` order.
Every leaf is a ``0x``-prefixed, 64-digit hex string.

Two calldata generations exist in the wild and both are accepted:

- legacy positional arrays, either ``[a, b, c, input]`` or the flattened
  ``[a0, a1, b, c, input]``;
- the structured record ``{"proof": {...}, "vk": {...}, "public_inputs": [...]}``.

``decode_ledger_calldata`` classifies the input once and rejects anything
else; ``normalize_ledger_calldata`` re-emits the structured form.

Version: 0.1.0
"""

import json
import re
import shlex
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from zkbridge.errors import ConfigurationError, ShapeError
from zkbridge.zk.field import FieldLike, to_field_int, to_hex
from zkbridge.zk.models import G1Point, G2Point, Proof, PublicSignals, VerifyingKey


LEDGER_NETWORKS: dict[str, dict[str, str]] = {
    "testnet": {
        "rpcUrl": "https://soroban-testnet.stellar.org",
        "networkPassphrase": "Test SDF Network ; September 2015",
    },
    "futurenet": {
        "rpcUrl": "https://rpc-futurenet.stellar.org",
        "networkPassphrase": "Test SDF Future Network ; October 2022",
    },
    "mainnet": {
        "rpcUrl": "https://soroban.stellar.org",
        "networkPassphrase": "Public Global Stellar Network ; September 2015",
    },
    "local": {
        "rpcUrl": "http://localhost:8000/soroban/rpc",
        "networkPassphrase": "Standalone Network ; February 2017",
    },
}

DEFAULT_CLI_TOOL = "stellar"
VERIFY_FUNCTION = "verify"

_CONTRACT_ID_RE = re.compile(r"[A-Z0-9]{56}")


class CalldataGeneration(str, Enum):
    """Known ledger calldata shapes."""

    LEGACY_POSITIONAL = "legacy_positional"
    LEGACY_FLATTENED = "legacy_flattened"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class LedgerCalldata:
    """Ledger calldata decoded into canonical objects."""

    generation: CalldataGeneration
    proof: Proof
    public_inputs: tuple[int, ...]
    verifying_key: VerifyingKey | None = None

    def to_structured(self) -> dict[str, Any]:
        """Emit the canonical structured form with hex-string leaves."""
        return _structured(self.proof, self.public_inputs, self.verifying_key)


def is_valid_contract_id(contract_id: str) -> bool:
    """Check for a 56-character strkey contract ID."""
    return isinstance(contract_id, str) and _CONTRACT_ID_RE.fullmatch(contract_id) is not None


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def _point_g1(value: Any, name: str) -> G1Point:
    if not (_is_sequence(value) or isinstance(value, Mapping)):
        raise ShapeError(f"{name} must be a G1 point, got {value!r}")
    return G1Point.parse(value, name)


def _point_g2(value: Any, name: str) -> G2Point:
    if not (_is_sequence(value) or isinstance(value, Mapping)):
        raise ShapeError(f"{name} must be a G2 point, got {value!r}")
    return G2Point.parse(value, name)


def _inputs(value: Any, name: str = "public_inputs") -> tuple[int, ...]:
    if not _is_sequence(value):
        raise ShapeError(f"{name} must be a list of field elements")
    if not all(_is_scalar(v) for v in value):
        raise ShapeError(f"{name} must contain only scalar field elements")
    return tuple(to_field_int(v) for v in value)


def _g1_hex(point: G1Point) -> dict[str, str]:
    return point.to_hex()


def _g2_hex(point: G2Point) -> dict[str, list[str]]:
    return point.to_hex()


def _vk_hex(vk: VerifyingKey) -> dict[str, Any]:
    return {
        "alpha": _g1_hex(vk.alpha),
        "beta": _g2_hex(vk.beta),
        "gamma": _g2_hex(vk.gamma),
        "delta": _g2_hex(vk.delta),
        "ic": [_g1_hex(p) for p in vk.ic],
    }


def _structured(
    proof: Proof,
    public_inputs: Sequence[int],
    verifying_key: VerifyingKey | None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        "proof": {
            "pi_a": _g1_hex(proof.pi_a),
            "pi_b": _g2_hex(proof.pi_b),
            "pi_c": _g1_hex(proof.pi_c),
        }
    }
    if verifying_key is not None:
        record["vk"] = _vk_hex(verifying_key)
    record["public_inputs"] = [to_hex(v) for v in public_inputs]
    return record


def format_proof_for_ledger(proof: Proof | dict[str, Any]) -> dict[str, Any]:
    """
    Arrange a proof for the ledger verifier.

    Returns ``{"a": {"x", "y"}, "b": {"x": [x0, x1], "y": [y0, y1]}, "c": {"x", "y"}}``
    with hex-string leaves and no coordinate reversal.
    """
    proof = Proof.parse(proof)
    return {
        "a": _g1_hex(proof.pi_a),
        "b": _g2_hex(proof.pi_b),
        "c": _g1_hex(proof.pi_c),
    }


def _decode_positional(raw: Sequence[Any]) -> LedgerCalldata:
    a, b, c, inputs = raw
    proof = Proof(
        pi_a=_point_g1(a, "a"),
        pi_b=_point_g2(b, "b"),
        pi_c=_point_g1(c, "c"),
    )
    return LedgerCalldata(
        generation=CalldataGeneration.LEGACY_POSITIONAL,
        proof=proof,
        public_inputs=_inputs(inputs, "input"),
    )


def _decode_flattened(raw: Sequence[Any]) -> LedgerCalldata:
    a0, a1, b, c, inputs = raw
    if not (_is_scalar(a0) and _is_scalar(a1)):
        raise ShapeError("Flattened calldata must start with two scalar A coordinates")
    proof = Proof(
        pi_a=G1Point(a0, a1),
        pi_b=_point_g2(b, "b"),
        pi_c=_point_g1(c, "c"),
    )
    return LedgerCalldata(
        generation=CalldataGeneration.LEGACY_FLATTENED,
        proof=proof,
        public_inputs=_inputs(inputs, "input"),
    )


def _pick(record: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in record:
            return record[name]
    raise ShapeError(f"Structured calldata proof is missing {' / '.join(names)}")


def _decode_structured(raw: Mapping[str, Any]) -> LedgerCalldata:
    unknown = set(raw) - {"proof", "vk", "public_inputs"}
    if unknown:
        raise ShapeError(f"Structured calldata has unknown fields: {', '.join(sorted(unknown))}")

    proof_record = raw["proof"]
    if not isinstance(proof_record, Mapping):
        raise ShapeError("Structured calldata proof must be an object")

    proof = Proof(
        pi_a=_point_g1(_pick(proof_record, "pi_a", "a"), "proof.pi_a"),
        pi_b=_point_g2(_pick(proof_record, "pi_b", "b"), "proof.pi_b"),
        pi_c=_point_g1(_pick(proof_record, "pi_c", "c"), "proof.pi_c"),
    )

    vk = None
    if raw.get("vk") is not None:
        vk = VerifyingKey.from_json(raw["vk"])

    return LedgerCalldata(
        generation=CalldataGeneration.STRUCTURED,
        proof=proof,
        public_inputs=_inputs(raw.get("public_inputs", [])),
        verifying_key=vk,
    )


def decode_ledger_calldata(raw: Any) -> LedgerCalldata:
    """
    Classify and decode ledger calldata of any known generation.

    Raises:
        ShapeError: If the input matches no known shape
        EncodingError: If a leaf is not a valid field element
    """
    if isinstance(raw, Mapping):
        if "proof" not in raw:
            raise ShapeError("Structured calldata must carry a 'proof' object")
        return _decode_structured(raw)

    if _is_sequence(raw):
        if len(raw) == 4:
            return _decode_positional(raw)
        if len(raw) == 5:
            return _decode_flattened(raw)
        raise ShapeError(f"Positional calldata must have 4 or 5 elements, got {len(raw)}")

    raise ShapeError(f"Unrecognized calldata shape: {type(raw).__name__}")


def normalize_ledger_calldata(raw: Any) -> dict[str, Any]:
    """Decode calldata of any generation and re-emit the structured form."""
    return decode_ledger_calldata(raw).to_structured()


def encode_verify_args(
    proof: Proof | dict[str, Any],
    public_signals: PublicSignals | Sequence[FieldLike],
    verifying_key: VerifyingKey | dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the structured ``verify`` arguments from canonical objects."""
    proof = Proof.parse(proof)
    signals = PublicSignals.parse(public_signals)
    vk = VerifyingKey.parse(verifying_key) if verifying_key is not None else None
    return _structured(proof, signals.values, vk)


def proof_to_hex(proof: Proof | dict[str, Any]) -> dict[str, str]:
    """
    Flatten a proof to one hex string per coordinate.

    Keys: ``a_x, a_y, b_x0, b_x1, b_y0, b_y1, c_x, c_y``.
    """
    proof = Proof.parse(proof)
    return {
        "a_x": to_hex(proof.pi_a.x),
        "a_y": to_hex(proof.pi_a.y),
        "b_x0": to_hex(proof.pi_b.x[0]),
        "b_x1": to_hex(proof.pi_b.x[1]),
        "b_y0": to_hex(proof.pi_b.y[0]),
        "b_y1": to_hex(proof.pi_b.y[1]),
        "c_x": to_hex(proof.pi_c.x),
        "c_y": to_hex(proof.pi_c.y),
    }


def build_cli_args(
    contract_id: str,
    network: str,
    proof: Proof | dict[str, Any],
    public_signals: PublicSignals | Sequence[FieldLike],
    tool: str = DEFAULT_CLI_TOOL,
    source: str | None = None,
) -> list[str]:
    """Build the argv of a ``contract invoke ... -- verify`` call."""
    if not contract_id:
        raise ConfigurationError("contractId")
    if not network:
        raise ConfigurationError("network")

    signals = PublicSignals.parse(public_signals)
    argv = [*shlex.split(tool), "contract", "invoke", "--id", contract_id]
    if source:
        argv += ["--source", source]
    argv += ["--network", network, "--", VERIFY_FUNCTION]

    for key, value in proof_to_hex(proof).items():
        argv += [f"--{key.replace('_', '-')}", value]

    argv += ["--public-inputs", json.dumps(signals.to_hex(), separators=(",", ":"))]
    return argv


def build_cli_command(
    contract_id: str,
    network: str,
    proof: Proof | dict[str, Any],
    public_signals: PublicSignals | Sequence[FieldLike],
    tool: str = DEFAULT_CLI_TOOL,
    source: str | None = None,
) -> str:
    """
    Format (never execute) a single CLI invocation of the ledger verifier.

    Example:
        stellar contract invoke --id C... --network testnet -- verify
            --a-x 0x.. --a-y 0x.. --b-x0 0x.. ... --public-inputs '["0x.."]'
    """
    return shlex.join(build_cli_args(contract_id, network, proof, public_signals, tool, source))


class LedgerContract:
    """
    Encoder facade bound to one ledger verifier deployment.

    Usage:
        contract = LedgerContract("CBPB...43OI", network="testnet")
        command = contract.build_cli_command(proof, public_signals)
    """

    def __init__(
        self,
        contract_id: str,
        network: str = "testnet",
        rpc_url: str | None = None,
        tool: str = DEFAULT_CLI_TOOL,
    ) -> None:
        if not contract_id:
            raise ConfigurationError("contractId")
        if not is_valid_contract_id(contract_id):
            raise ConfigurationError(
                "contractId", f"contractId is not a valid contract ID: {contract_id!r}"
            )
        if rpc_url is None and network not in LEDGER_NETWORKS:
            raise ConfigurationError("rpcUrl", f"rpcUrl not configured for network {network!r}")

        self._contract_id = contract_id
        self._network = network
        self._rpc_url = rpc_url or LEDGER_NETWORKS[network]["rpcUrl"]
        self._tool = tool

    @property
    def contract_id(self) -> str:
        return self._contract_id

    @property
    def network(self) -> str:
        return self._network

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def network_passphrase(self) -> str | None:
        info = LEDGER_NETWORKS.get(self._network)
        return info["networkPassphrase"] if info else None

    def format_proof(self, proof: Proof | dict[str, Any]) -> dict[str, Any]:
        return format_proof_for_ledger(proof)

    def proof_to_hex(self, proof: Proof | dict[str, Any]) -> dict[str, str]:
        return proof_to_hex(proof)

    def encode_verify_args(
        self,
        proof: Proof | dict[str, Any],
        public_signals: PublicSignals | Sequence[FieldLike],
        verifying_key: VerifyingKey | dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        return encode_verify_args(proof, public_signals, verifying_key)

    def build_cli_command(
        self,
        proof: Proof | dict[str, Any],
        public_signals: PublicSignals | Sequence[FieldLike],
        source: str | None = None,
    ) -> str:
        return build_cli_command(
            self._contract_id, self._network, proof, public_signals, self._tool, source
        )


__all__ = [
    "CalldataGeneration",
    "LEDGER_NETWORKS",
    "LedgerCalldata",
    "LedgerContract",
    "build_cli_args",
    "build_cli_command",
    "decode_ledger_calldata",
    "encode_verify_args",
    "format_proof_for_ledger",
    "is_valid_contract_id",
    "normalize_ledger_calldata",
    "proof_to_hex",
]
