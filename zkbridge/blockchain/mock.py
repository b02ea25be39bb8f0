"""
Mock Chain Client
=================

In-memory mock implementation for development and testing.

Version: 0.1.0
"""

import hashlib
import uuid
from typing import Any

from zkbridge.blockchain.client import ChainClient, ChainRequest
from zkbridge.contracts.targets import ChainKind
from zkbridge.logging import get_logger

logger = get_logger(__name__)

# Simulated cost of a Groth16 verifyProof call
_BASE_GAS = 181_000
_GAS_PER_INPUT = 6_150


class MockChainClient(ChainClient):
    """
    In-memory mock chain client.

    Records every submitted request and answers with a fixed verdict. No
    pairing check is performed. Data is stored in memory and lost on restart.

    Usage:
        client = MockChainClient(ChainKind.EVM, accept=True)
        response = await client.submit(request)
    """

    def __init__(self, kind: ChainKind = ChainKind.EVM, accept: bool = True) -> None:
        """Initialize mock client with in-memory storage."""
        self._kind = ChainKind(kind)
        self._accept = accept
        self._connected = False
        self._block_number = 1000

        # In-memory storage
        self._submissions: list[ChainRequest] = []
        self._responses: dict[str, dict[str, Any]] = {}

        logger.debug("mock_chain_client_initialized", kind=self._kind.value)

    @property
    def kind(self) -> ChainKind:
        return self._kind

    @property
    def submissions(self) -> list[ChainRequest]:
        """Requests received so far, oldest first."""
        return list(self._submissions)

    def set_accept(self, accept: bool) -> None:
        """Change the verdict returned for later submissions."""
        self._accept = accept

    async def connect(self) -> None:
        """Simulate connection."""
        self._connected = True
        logger.info("mock_chain_client_connected", kind=self._kind.value)

    async def disconnect(self) -> None:
        """Simulate disconnection."""
        self._connected = False
        logger.info("mock_chain_client_disconnected", kind=self._kind.value)

    async def health_check(self) -> dict[str, Any]:
        """Check mock client health."""
        return {
            "status": "healthy",
            "mode": "mock",
            "kind": self._kind.value,
            "connected": self._connected,
            "block_number": self._block_number,
            "submissions": len(self._submissions),
        }

    def _generate_tx_hash(self) -> str:
        """Generate a mock transaction hash."""
        return "0x" + hashlib.sha256(uuid.uuid4().bytes).hexdigest()

    def _next_block(self) -> int:
        """Get next block number."""
        self._block_number += 1
        return self._block_number

    def _estimate_gas(self, request: ChainRequest) -> int:
        data = request.payload.get("data", "0x")
        # 8 words of proof, the rest are public inputs
        n_inputs = max(0, (len(data) - 2) // 64 - 8)
        return _BASE_GAS + _GAS_PER_INPUT * n_inputs

    async def submit(self, request: ChainRequest) -> dict[str, Any]:
        """Record the request and answer with the configured verdict."""
        if request.chain != self._kind:
            raise ValueError(
                f"{self._kind.value} client cannot submit {request.chain.value} requests"
            )

        self._submissions.append(request)
        tx_hash = self._generate_tx_hash()
        block_number = self._next_block()

        if self._kind == ChainKind.EVM:
            response: dict[str, Any] = {
                "valid": self._accept,
                "txHash": tx_hash,
                "gasUsed": self._estimate_gas(request),
                "blockNumber": block_number,
            }
        else:
            response = {
                "result": self._accept,
                "txHash": tx_hash,
                "ledger": block_number,
            }

        self._responses[tx_hash] = response

        logger.debug(
            "mock_chain_request_submitted",
            kind=self._kind.value,
            contract=request.contract,
            function=request.function,
            tx_hash=tx_hash,
            valid=self._accept,
        )

        return dict(response)

    async def get_response(self, tx_hash: str) -> dict[str, Any] | None:
        """Look up the response recorded for a transaction hash."""
        response = self._responses.get(tx_hash)
        return dict(response) if response is not None else None

    def clear_all(self) -> None:
        """Clear all stored data (for testing)."""
        self._submissions.clear()
        self._responses.clear()
        self._block_number = 1000
        logger.info("mock_chain_client_cleared", kind=self._kind.value)
