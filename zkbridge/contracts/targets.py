"""
Chain Targets
=============

Tagged union selecting the encoder and client a verification is routed to.

Version: 0.1.0
"""

from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from zkbridge.errors import ShapeError, UnsupportedChainError


class ChainKind(str, Enum):
    """Verifier runtime families."""

    EVM = "evm"
    LEDGER = "ledger"


# Chain names accepted in place of the variant tag
CHAIN_ALIASES: dict[str, tuple[ChainKind, str | None]] = {
    "evm": (ChainKind.EVM, None),
    "ethereum": (ChainKind.EVM, "ethereum"),
    "sepolia": (ChainKind.EVM, "sepolia"),
    "polygon": (ChainKind.EVM, "polygon"),
    "amoy": (ChainKind.EVM, "amoy"),
    "arbitrum": (ChainKind.EVM, "arbitrum"),
    "optimism": (ChainKind.EVM, "optimism"),
    "base": (ChainKind.EVM, "base"),
    "ledger": (ChainKind.LEDGER, None),
    "stellar": (ChainKind.LEDGER, None),
    "soroban": (ChainKind.LEDGER, None),
}


class _TargetBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    rpc_url: str | None = Field(default=None, alias="rpcUrl")


class EVMTarget(_TargetBase):
    """A Solidity Groth16 verifier contract."""

    chain: Literal[ChainKind.EVM] = ChainKind.EVM
    contract_address: str | None = Field(default=None, alias="contractAddress")
    network: str = "ethereum"


class LedgerTarget(_TargetBase):
    """A verifier contract on the ledger (Soroban-style) runtime."""

    chain: Literal[ChainKind.LEDGER] = ChainKind.LEDGER
    contract_id: str | None = Field(default=None, alias="contractId")
    network: str = "testnet"


ChainTarget = Annotated[EVMTarget | LedgerTarget, Field(discriminator="chain")]

_target_adapter: TypeAdapter[EVMTarget | LedgerTarget] = TypeAdapter(ChainTarget)


def parse_chain_target(value: "EVMTarget | LedgerTarget | Mapping[str, Any]") -> EVMTarget | LedgerTarget:
    """
    Decode a chain target from a model or a plain mapping.

    The ``chain`` tag may be a variant name (``"evm"``, ``"ledger"``) or a
    chain name such as ``"ethereum"``, ``"polygon"`` or ``"stellar"``.

    Raises:
        UnsupportedChainError: If the tag names no known variant
        ShapeError: If the mapping carries unknown or mistyped fields
    """
    if isinstance(value, (EVMTarget, LedgerTarget)):
        return value
    if not isinstance(value, Mapping):
        raise UnsupportedChainError(value)

    data = dict(value)
    tag = data.get("chain")
    tag_name = tag.value if isinstance(tag, ChainKind) else str(tag).lower()
    if tag_name not in CHAIN_ALIASES:
        raise UnsupportedChainError(tag)

    kind, network = CHAIN_ALIASES[tag_name]
    data["chain"] = kind
    if network is not None:
        data.setdefault("network", network)

    try:
        return _target_adapter.validate_python(data)
    except ValidationError as e:
        raise ShapeError(f"Invalid {kind.value} chain target: {e}") from e
