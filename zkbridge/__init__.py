"""
zkbridge
========

Cross-chain Groth16 proof serialization and verification dispatch.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - zk: Field codec, canonical proof model, prover wrapper, verifier dispatch
    - contracts: EVM and ledger-contract calldata encoders
    - blockchain: Chain client interface (mock/live)
    - credentials: Verifiable credential to circuit input conversion

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "zkbridge Team"

from zkbridge.config import settings
from zkbridge.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
