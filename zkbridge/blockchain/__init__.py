"""
Blockchain Module
=================

Interface for the external clients that submit verifier calls.

Supports:
- Mock (development/testing)
- Live clients injected by the application (EVM RPC, ledger RPC)

Usage:
    from zkbridge.blockchain import MockChainClient
    from zkbridge.contracts.targets import ChainKind

    client = MockChainClient(ChainKind.LEDGER)
    response = await client.submit(request)
"""

from zkbridge.blockchain.client import ChainClient, ChainRequest
from zkbridge.blockchain.mock import MockChainClient

__all__ = [
    # Client
    "ChainClient",
    "ChainRequest",
    # Implementations
    "MockChainClient",
]
