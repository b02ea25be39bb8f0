"""
Canonical Proof Model
=====================

Typed Groth16 proof, verifying key and public signals built from field codec
primitives.

The curve points are frozen dataclasses: a proof is produced once by the
external prover and then serialized any number of times to different target
encodings. Parsing accepts the snarkjs JSON layout and discards the trailing
projective coordinate of affine points.

Version: 0.1.0
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from zkbridge.errors import EncodingError, ShapeError
from zkbridge.zk.field import FieldLike, to_decimal, to_field_int, to_hex


SUPPORTED_PROTOCOL = "groth16"
SUPPORTED_CURVES = ("bn128", "bn254")


def _pair(coords: Any, name: str) -> tuple[FieldLike, FieldLike]:
    if isinstance(coords, (str, bytes)) or not isinstance(coords, Sequence) or len(coords) != 2:
        raise ShapeError(f"{name} must be a pair of field elements, got {coords!r}")
    return coords[0], coords[1]


def _strip_projective(coords: Any, name: str, identity: Any) -> Any:
    """Drop the projective Z coordinate snarkjs appends to affine points."""
    if isinstance(coords, Sequence) and not isinstance(coords, str) and len(coords) == 3:
        z = coords[2]
        if [str(v) for v in _as_list(z)] != [str(v) for v in _as_list(identity)]:
            raise ShapeError(f"{name} is not an affine point (Z={z!r})")
        return coords[:2]
    return coords


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, Sequence) and not isinstance(value, str):
        return list(value)
    return [value]


@dataclass(frozen=True)
class G1Point:
    """Affine point on the BN254 G1 group."""

    x: int
    y: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", to_field_int(self.x))
        object.__setattr__(self, "y", to_field_int(self.y))

    @classmethod
    def parse(cls, value: Any, name: str = "G1 point") -> "G1Point":
        """Build from ``[x, y]``, ``[x, y, "1"]`` or ``{"x": .., "y": ..}``."""
        if isinstance(value, G1Point):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(value["x"], value["y"])
            except KeyError as e:
                raise ShapeError(f"{name} is missing coordinate {e.args[0]!r}") from e
        x, y = _pair(_strip_projective(value, name, "1"), name)
        return cls(x, y)

    def to_decimal(self) -> list[str]:
        return [to_decimal(self.x), to_decimal(self.y)]

    def to_hex(self) -> dict[str, str]:
        return {"x": to_hex(self.x), "y": to_hex(self.y)}


@dataclass(frozen=True)
class G2Point:
    """
    Affine point on the BN254 G2 group.

    Each coordinate is an Fq2 element ``c0 + c1*u`` stored as ``(c0, c1)``.
    """

    x: tuple[int, int]
    y: tuple[int, int]

    def __post_init__(self) -> None:
        x0, x1 = _pair(self.x, "G2 x")
        y0, y1 = _pair(self.y, "G2 y")
        object.__setattr__(self, "x", (to_field_int(x0), to_field_int(x1)))
        object.__setattr__(self, "y", (to_field_int(y0), to_field_int(y1)))

    @classmethod
    def parse(cls, value: Any, name: str = "G2 point") -> "G2Point":
        """Build from ``[[x0, x1], [y0, y1]]`` (optionally with ``["1", "0"]``) or a mapping."""
        if isinstance(value, G2Point):
            return value
        if isinstance(value, Mapping):
            try:
                return cls(tuple(_pair(value["x"], f"{name}.x")), tuple(_pair(value["y"], f"{name}.y")))
            except KeyError as e:
                raise ShapeError(f"{name} is missing coordinate {e.args[0]!r}") from e
        x, y = _pair(_strip_projective(value, name, ["1", "0"]), name)
        return cls(tuple(_pair(x, f"{name}.x")), tuple(_pair(y, f"{name}.y")))

    def to_decimal(self) -> list[list[str]]:
        return [
            [to_decimal(self.x[0]), to_decimal(self.x[1])],
            [to_decimal(self.y[0]), to_decimal(self.y[1])],
        ]

    def to_hex(self) -> dict[str, list[str]]:
        return {
            "x": [to_hex(self.x[0]), to_hex(self.x[1])],
            "y": [to_hex(self.y[0]), to_hex(self.y[1])],
        }


@dataclass(frozen=True)
class Proof:
    """
    A Groth16 proof.

    Compatible with the snarkjs Groth16 proof format.
    """

    pi_a: G1Point
    pi_b: G2Point
    pi_c: G1Point
    protocol: str = SUPPORTED_PROTOCOL
    curve: str = "bn128"

    def __post_init__(self) -> None:
        object.__setattr__(self, "pi_a", G1Point.parse(self.pi_a, "pi_a"))
        object.__setattr__(self, "pi_b", G2Point.parse(self.pi_b, "pi_b"))
        object.__setattr__(self, "pi_c", G1Point.parse(self.pi_c, "pi_c"))
        if self.protocol != SUPPORTED_PROTOCOL:
            raise ShapeError(f"Unsupported proof protocol: {self.protocol!r}")
        if self.curve not in SUPPORTED_CURVES:
            raise ShapeError(f"Unsupported proof curve: {self.curve!r}")

    @classmethod
    def from_snarkjs(cls, data: Mapping[str, Any]) -> "Proof":
        """Create from the JSON object emitted by ``snarkjs groth16 prove``."""
        if not isinstance(data, Mapping):
            raise ShapeError(f"Proof must be a JSON object, got {type(data).__name__}")
        missing = [k for k in ("pi_a", "pi_b", "pi_c") if k not in data]
        if missing:
            raise ShapeError(f"Proof is missing fields: {', '.join(missing)}")

        return cls(
            pi_a=G1Point.parse(data["pi_a"], "pi_a"),
            pi_b=G2Point.parse(data["pi_b"], "pi_b"),
            pi_c=G1Point.parse(data["pi_c"], "pi_c"),
            protocol=data.get("protocol", SUPPORTED_PROTOCOL),
            curve=data.get("curve", "bn128"),
        )

    @classmethod
    def parse(cls, value: "Proof | Mapping[str, Any]") -> "Proof":
        if isinstance(value, Proof):
            return value
        return cls.from_snarkjs(value)

    def to_snarkjs(self) -> dict[str, Any]:
        """Convert back to the snarkjs JSON layout."""
        return {
            "pi_a": [*self.pi_a.to_decimal(), "1"],
            "pi_b": [*self.pi_b.to_decimal(), ["1", "0"]],
            "pi_c": [*self.pi_c.to_decimal(), "1"],
            "protocol": self.protocol,
            "curve": self.curve,
        }


@dataclass(frozen=True)
class VerifyingKey:
    """Groth16 verifying key for one circuit."""

    alpha: G1Point
    beta: G2Point
    gamma: G2Point
    delta: G2Point
    ic: tuple[G1Point, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "alpha", G1Point.parse(self.alpha, "alpha"))
        for name in ("beta", "gamma", "delta"):
            object.__setattr__(self, name, G2Point.parse(getattr(self, name), name))
        object.__setattr__(
            self, "ic", tuple(G1Point.parse(p, f"ic[{i}]") for i, p in enumerate(self.ic))
        )
        if not self.ic:
            raise ShapeError("Verifying key must have at least one IC point")

    @property
    def n_public(self) -> int:
        """Number of public inputs the key accepts."""
        return len(self.ic) - 1

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "VerifyingKey":
        """
        Create from a snarkjs ``verification_key.json`` or the mirrored layout.

        The snarkjs layout uses ``vk_alpha_1``/``vk_beta_2``/``vk_gamma_2``/
        ``vk_delta_2``/``IC``; the mirrored layout uses ``alpha``/``beta``/
        ``gamma``/``delta``/``ic``.
        """
        if not isinstance(data, Mapping):
            raise ShapeError(f"Verifying key must be a JSON object, got {type(data).__name__}")

        if "vk_alpha_1" in data:
            keys = ("vk_alpha_1", "vk_beta_2", "vk_gamma_2", "vk_delta_2", "IC")
        else:
            keys = ("alpha", "beta", "gamma", "delta", "ic")

        missing = [k for k in keys if k not in data]
        if missing:
            raise ShapeError(f"Verifying key is missing fields: {', '.join(missing)}")

        alpha, beta, gamma, delta, ic = (data[k] for k in keys)
        if isinstance(ic, (str, Mapping)) or not isinstance(ic, Sequence):
            raise ShapeError("Verifying key IC must be a list of G1 points")

        return cls(
            alpha=G1Point.parse(alpha, "alpha"),
            beta=G2Point.parse(beta, "beta"),
            gamma=G2Point.parse(gamma, "gamma"),
            delta=G2Point.parse(delta, "delta"),
            ic=tuple(G1Point.parse(p, f"ic[{i}]") for i, p in enumerate(ic)),
        )

    @classmethod
    def parse(cls, value: "VerifyingKey | Mapping[str, Any]") -> "VerifyingKey":
        if isinstance(value, VerifyingKey):
            return value
        return cls.from_json(value)

    def to_snarkjs(self) -> dict[str, Any]:
        return {
            "protocol": SUPPORTED_PROTOCOL,
            "curve": "bn128",
            "nPublic": self.n_public,
            "vk_alpha_1": [*self.alpha.to_decimal(), "1"],
            "vk_beta_2": [*self.beta.to_decimal(), ["1", "0"]],
            "vk_gamma_2": [*self.gamma.to_decimal(), ["1", "0"]],
            "vk_delta_2": [*self.delta.to_decimal(), ["1", "0"]],
            "IC": [[*p.to_decimal(), "1"] for p in self.ic],
        }


@dataclass(frozen=True)
class PublicSignals:
    """
    Ordered public signals of a proof.

    ``validity_index`` names the position of the circuit's boolean validity
    flag; ``None`` for circuits that do not expose one.
    """

    values: tuple[int, ...]
    validity_index: int | None = 0

    def __post_init__(self) -> None:
        if isinstance(self.values, (str, bytes)) or not isinstance(self.values, Sequence):
            raise ShapeError("Public signals must be a list of field elements")
        object.__setattr__(self, "values", tuple(to_field_int(v) for v in self.values))
        if self.validity_index is not None and self.values:
            if not 0 <= self.validity_index < len(self.values):
                raise ShapeError(
                    f"validity_index {self.validity_index} out of range for "
                    f"{len(self.values)} public signals"
                )

    @classmethod
    def parse(
        cls,
        value: "PublicSignals | Sequence[FieldLike]",
        validity_index: int | None = 0,
    ) -> "PublicSignals":
        if isinstance(value, PublicSignals):
            return value
        return cls(values=value, validity_index=validity_index)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[int]:
        return iter(self.values)

    @property
    def validity_flag(self) -> bool | None:
        """The circuit's validity flag, or None when the circuit has none."""
        if self.validity_index is None or not self.values:
            return None
        flag = self.values[self.validity_index]
        if flag not in (0, 1):
            raise EncodingError(f"Validity flag must be 0 or 1, got {flag}")
        return flag == 1

    def to_decimal(self) -> list[str]:
        return [to_decimal(v) for v in self.values]

    def to_hex(self) -> list[str]:
        return [to_hex(v) for v in self.values]


class ProofMetadata(BaseModel):
    """Metadata about a generated proof."""

    circuit_name: str
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    proving_time_ms: int = Field(..., ge=0)


@dataclass(frozen=True)
class ProofBundle:
    """Complete prover output: proof, public signals and metadata."""

    proof: Proof
    public_signals: PublicSignals
    metadata: ProofMetadata = field(compare=False)

    @property
    def is_valid_claim(self) -> bool | None:
        """Shortcut for the circuit's validity flag."""
        return self.public_signals.validity_flag


class VerificationResult(BaseModel):
    """Uniform result of an off-chain or on-chain verification."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    chain: str | None = None
    verified_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    verification_time_ms: int = Field(default=0, ge=0)

    # On-chain verification
    tx_hash: str | None = None
    gas_used: int | None = None
    block_number: int | None = None
