"""
Chain Client Interface
======================

Abstract base class and request model for the external clients that submit
verifier calls to a chain.

Clients own signing, submission and retry. The verification dispatcher only
hands them an already-encoded ``ChainRequest`` and reads back a raw response
mapping.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from zkbridge.contracts.targets import ChainKind


class ChainRequest(BaseModel):
    """An encoded verifier call ready for submission."""

    model_config = ConfigDict(frozen=True)

    chain: ChainKind
    network: str
    contract: str = Field(..., description="EVM contract address or ledger contract ID")
    rpc_url: str | None = None
    function: str = Field(..., description="Function or method invoked on the contract")
    payload: dict[str, Any] = Field(default_factory=dict)


class ChainClient(ABC):
    """
    Abstract base class for chain clients.

    One implementation per verifier runtime. ``submit`` returns the raw
    response; recognized keys are ``valid`` (or ``result``), ``txHash``,
    ``gasUsed`` and ``blockNumber`` (or ``ledger``).
    """

    @property
    @abstractmethod
    def kind(self) -> ChainKind:
        """Verifier runtime this client talks to."""
        ...

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the chain network."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the chain network."""
        ...

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Check client health."""
        ...

    @abstractmethod
    async def submit(self, request: ChainRequest) -> dict[str, Any]:
        """
        Submit a verifier call.

        Args:
            request: Encoded call for the target contract

        Returns:
            Raw response mapping
        """
        ...
