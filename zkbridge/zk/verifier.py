"""
Groth16 Verification Dispatch
=============================

Routes a proof to the matching on-chain verifier contract or to the
off-chain pairing check.

The dispatcher encodes the proof with the encoder of the chain target's
variant and hands the result to an injected chain client. It never retries;
the client owns submission policy. Configuration is an immutable
``VerifierConfig``; ``with_verification_key`` and ``with_target`` return new
verifiers, so calls already in flight keep the snapshot they started with.

Version: 0.1.0
"""

import asyncio
import json
import shlex
import subprocess
import tempfile
import time
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, InstanceOf

from zkbridge.blockchain.client import ChainClient, ChainRequest
from zkbridge.contracts import evm, ledger
from zkbridge.contracts.targets import (
    ChainKind,
    ChainTarget,
    EVMTarget,
    LedgerTarget,
    parse_chain_target,
)
from zkbridge.errors import ChainClientError, ConfigurationError, ShapeError, ZKBridgeError
from zkbridge.logging import get_logger
from zkbridge.zk.field import FieldLike
from zkbridge.zk.models import Proof, PublicSignals, VerificationResult, VerifyingKey


if TYPE_CHECKING:
    from zkbridge.config.settings import Settings


logger = get_logger(__name__)


class LocalProofChecker(Protocol):
    """Off-chain Groth16 pairing check."""

    async def check(
        self,
        verifying_key: VerifyingKey,
        proof: Proof,
        public_signals: PublicSignals,
    ) -> bool: ...


class SnarkjsProofChecker:
    """
    Pairing check backed by ``snarkjs groth16 verify``.

    Writes the key, proof and signals to a temporary directory and runs
    snarkjs off the event loop.
    """

    def __init__(self, snarkjs_command: str = "npx snarkjs"):
        self.snarkjs_command = snarkjs_command

    async def check(
        self,
        verifying_key: VerifyingKey,
        proof: Proof,
        public_signals: PublicSignals,
    ) -> bool:
        with tempfile.TemporaryDirectory(prefix="zkbridge-verify-") as tmp:
            workdir = Path(tmp)
            vkey_file = workdir / "verification_key.json"
            proof_file = workdir / "proof.json"
            public_file = workdir / "public.json"

            with open(vkey_file, "w") as f:
                json.dump(verifying_key.to_snarkjs(), f)
            with open(proof_file, "w") as f:
                json.dump(proof.to_snarkjs(), f)
            with open(public_file, "w") as f:
                json.dump(public_signals.to_decimal(), f)

            try:
                result = await asyncio.to_thread(
                    subprocess.run,
                    [
                        *shlex.split(self.snarkjs_command),
                        "groth16",
                        "verify",
                        str(vkey_file),
                        str(public_file),
                        str(proof_file),
                    ],
                    capture_output=True,
                    text=True,
                )
            except OSError as e:
                raise ConfigurationError(
                    "snarkjs_command", f"snarkjs could not be started: {e}"
                ) from e

        if result.returncode != 0:
            logger.debug("snarkjs_verify_rejected", stderr=result.stderr, stdout=result.stdout)
            return False
        return "OK" in result.stdout


def _quantity(value: Any) -> int | None:
    """Parse a JSON-RPC quantity: int, decimal string or ``0x`` hex string."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError(f"expected a quantity, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text[:2] in ("0x", "0X"):
            return int(text[2:], 16)
        return int(text, 10)
    raise TypeError(f"expected a quantity, got {type(value).__name__}")


def _tx_hash(value: Any) -> str | None:
    """Transaction hashes may arrive as raw bytes from web3-style clients."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value


class VerifierConfig(BaseModel):
    """Immutable verifier configuration: verifying key and default chain target."""

    model_config = ConfigDict(frozen=True)

    verification_key: InstanceOf[VerifyingKey] | None = None
    target: ChainTarget | None = None

    @classmethod
    def build(
        cls,
        verification_key: VerifyingKey | Mapping[str, Any] | None = None,
        target: EVMTarget | LedgerTarget | Mapping[str, Any] | None = None,
    ) -> "VerifierConfig":
        """
        Build a config from models or raw JSON-like mappings.

        Raises:
            ShapeError: If the key or target is malformed
            UnsupportedChainError: If the target names an unknown chain
        """
        return cls(
            verification_key=VerifyingKey.parse(verification_key) if verification_key is not None else None,
            target=parse_chain_target(target) if target is not None else None,
        )


class ProofVerifier:
    """
    Groth16 proof verifier.

    Supports both off-chain verification (via a local pairing checker) and
    on-chain verification (via an injected chain client per runtime).

    Usage:
        verifier = ProofVerifier(
            VerifierConfig.build(target={"chain": "polygon", "contractAddress": "0x..."}),
            evm_client=client,
        )
        result = await verifier.verify_on_chain(proof, public_signals)
    """

    def __init__(
        self,
        config: VerifierConfig | None = None,
        evm_client: ChainClient | None = None,
        ledger_client: ChainClient | None = None,
        local_checker: LocalProofChecker | None = None,
    ):
        self._config = config or VerifierConfig()
        self._clients: dict[ChainKind, ChainClient] = {}
        for kind, client in ((ChainKind.EVM, evm_client), (ChainKind.LEDGER, ledger_client)):
            if client is None:
                continue
            if client.kind != kind:
                raise ConfigurationError(
                    f"{kind.value}_client",
                    f"{kind.value}_client is a {client.kind.value} client",
                )
            self._clients[kind] = client
        self._local_checker = local_checker

    @property
    def config(self) -> VerifierConfig:
        return self._config

    def _replace(self, config: VerifierConfig) -> "ProofVerifier":
        return ProofVerifier(
            config,
            evm_client=self._clients.get(ChainKind.EVM),
            ledger_client=self._clients.get(ChainKind.LEDGER),
            local_checker=self._local_checker,
        )

    def with_verification_key(self, verification_key: VerifyingKey | Mapping[str, Any]) -> "ProofVerifier":
        """Return a new verifier using another verifying key."""
        return self._replace(
            self._config.model_copy(update={"verification_key": VerifyingKey.parse(verification_key)})
        )

    def with_target(self, target: EVMTarget | LedgerTarget | Mapping[str, Any]) -> "ProofVerifier":
        """Return a new verifier with another default chain target."""
        return self._replace(self._config.model_copy(update={"target": parse_chain_target(target)}))

    # =========================================================================
    # Encoding
    # =========================================================================

    def _evm_request(self, target: EVMTarget, proof: Proof, signals: PublicSignals) -> ChainRequest:
        calldata = evm.get_calldata(proof, signals, target.contract_address or "")
        rpc_url = target.rpc_url or evm.SUPPORTED_NETWORKS.get(target.network, {}).get("rpcUrl")
        return ChainRequest(
            chain=ChainKind.EVM,
            network=target.network,
            contract=calldata.to,
            rpc_url=rpc_url,
            function="verifyProof",
            payload=calldata.model_dump(by_alias=True),
        )

    def _ledger_request(self, target: LedgerTarget, proof: Proof, signals: PublicSignals) -> ChainRequest:
        contract = ledger.LedgerContract(
            target.contract_id or "", network=target.network, rpc_url=target.rpc_url
        )
        return ChainRequest(
            chain=ChainKind.LEDGER,
            network=contract.network,
            contract=contract.contract_id,
            rpc_url=contract.rpc_url,
            function=ledger.VERIFY_FUNCTION,
            payload={
                "args": contract.encode_verify_args(proof, signals, self._config.verification_key),
                "cliCommand": contract.build_cli_command(proof, signals),
            },
        )

    def _encode(self, target: EVMTarget | LedgerTarget, proof: Proof, signals: PublicSignals) -> ChainRequest:
        if isinstance(target, EVMTarget):
            return self._evm_request(target, proof, signals)
        return self._ledger_request(target, proof, signals)

    # =========================================================================
    # Verification
    # =========================================================================

    @staticmethod
    def _translate(chain: str, raw: Any, verification_time_ms: int) -> VerificationResult:
        """Map a raw client response onto a VerificationResult."""
        if not isinstance(raw, Mapping):
            raise ChainClientError(chain, f"unexpected response type {type(raw).__name__}")

        valid = raw.get("valid", raw.get("result"))
        if not isinstance(valid, bool):
            raise ChainClientError(chain, f"response carries no boolean verdict: {raw!r}")

        try:
            return VerificationResult(
                valid=valid,
                chain=chain,
                verification_time_ms=verification_time_ms,
                tx_hash=_tx_hash(raw.get("txHash", raw.get("tx_hash"))),
                gas_used=_quantity(raw.get("gasUsed", raw.get("gas_used"))),
                block_number=_quantity(
                    raw.get("blockNumber", raw.get("block_number", raw.get("ledger")))
                ),
            )
        except (ValueError, TypeError) as e:
            raise ChainClientError(chain, f"malformed response: {e}") from e

    async def verify_on_chain(
        self,
        proof: Proof | Mapping[str, Any],
        public_signals: PublicSignals | Sequence[FieldLike],
        target: EVMTarget | LedgerTarget | Mapping[str, Any] | None = None,
    ) -> VerificationResult:
        """
        Verify a proof via a verifier contract.

        Args:
            proof: Canonical proof or snarkjs proof JSON
            public_signals: Public signals of the proof
            target: Chain target; defaults to the configured one

        Returns:
            VerificationResult with transaction details

        Raises:
            UnsupportedChainError: If the target names an unknown chain
            ConfigurationError: If the contract identifier, the target or the
                client for the target's runtime is missing
            ChainClientError: If the client fails; the client's exception is
                chained as ``__cause__``
        """
        proof = Proof.parse(proof)
        signals = PublicSignals.parse(public_signals)

        resolved = parse_chain_target(target) if target is not None else self._config.target
        if resolved is None:
            raise ConfigurationError("target")

        request = self._encode(resolved, proof, signals)

        client = self._clients.get(resolved.chain)
        if client is None:
            raise ConfigurationError(f"{resolved.chain.value}_client")

        chain = resolved.chain.value
        start_time = time.time()
        try:
            raw = await client.submit(request)
        except ZKBridgeError:
            raise
        except Exception as e:
            logger.error(
                "chain_client_failed",
                chain=chain,
                network=request.network,
                contract=request.contract,
                error=str(e),
            )
            raise ChainClientError(chain, str(e)) from e
        verification_time_ms = int((time.time() - start_time) * 1000)

        result = self._translate(chain, raw, verification_time_ms)

        logger.info(
            "zk_proof_verified_on_chain",
            chain=chain,
            network=request.network,
            contract=request.contract,
            valid=result.valid,
            tx_hash=result.tx_hash,
            verification_time_ms=verification_time_ms,
        )

        return result

    async def verify_local(
        self,
        proof: Proof | Mapping[str, Any],
        public_signals: PublicSignals | Sequence[FieldLike],
    ) -> bool:
        """
        Verify a proof off-chain with the configured verifying key.

        Raises:
            ConfigurationError: If no verifying key or local checker is set
            ShapeError: If the signal count does not match the key
        """
        verifying_key = self._config.verification_key
        if verifying_key is None:
            raise ConfigurationError("verification key")
        if self._local_checker is None:
            raise ConfigurationError("local checker")

        proof = Proof.parse(proof)
        signals = PublicSignals.parse(public_signals)
        if len(signals) != verifying_key.n_public:
            raise ShapeError(
                f"Verifying key expects {verifying_key.n_public} public signals, got {len(signals)}"
            )

        valid = await self._local_checker.check(verifying_key, proof, signals)

        logger.info("zk_proof_verified_locally", valid=valid, public_signals=len(signals))
        return valid

    async def verify(
        self,
        proof: Proof | Mapping[str, Any],
        public_signals: PublicSignals | Sequence[FieldLike],
        on_chain: bool = False,
        target: EVMTarget | LedgerTarget | Mapping[str, Any] | None = None,
    ) -> VerificationResult:
        """Verify on-chain or off-chain and return a uniform result."""
        if on_chain:
            return await self.verify_on_chain(proof, public_signals, target)

        start_time = time.time()
        valid = await self.verify_local(proof, public_signals)
        return VerificationResult(
            valid=valid,
            verification_time_ms=int((time.time() - start_time) * 1000),
        )


def load_verification_key(path: str | Path) -> VerifyingKey:
    """
    Load a snarkjs ``verification_key.json``.

    Raises:
        ConfigurationError: If the file does not exist
        ShapeError: If the file is not a valid verifying key
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError("vkey_path", f"Verification key not found: {path}")
    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ShapeError(f"Verification key is not valid JSON: {path}") from e
    return VerifyingKey.from_json(data)


def build_verifier(
    settings: "Settings | None" = None,
    *,
    evm_client: ChainClient | None = None,
    ledger_client: ChainClient | None = None,
    local_checker: LocalProofChecker | None = None,
) -> ProofVerifier:
    """
    Build a verifier from application settings.

    In mock chain mode, clients that are not passed in are replaced by
    in-memory mock clients. In testnet/mainnet mode the live clients must be
    injected.
    """
    from zkbridge.config.settings import ChainMode, get_settings

    settings = settings or get_settings()

    verification_key = None
    if settings.circuit.vkey_path is not None:
        verification_key = load_verification_key(settings.circuit.vkey_path)

    if settings.chain_mode == ChainMode.MOCK:
        from zkbridge.blockchain.mock import MockChainClient

        evm_client = evm_client or MockChainClient(ChainKind.EVM)
        ledger_client = ledger_client or MockChainClient(ChainKind.LEDGER)

    verifier = ProofVerifier(
        VerifierConfig(verification_key=verification_key, target=settings.default_target()),
        evm_client=evm_client,
        ledger_client=ledger_client,
        local_checker=local_checker or SnarkjsProofChecker(settings.circuit.snarkjs_command),
    )

    logger.info(
        "verifier_built",
        chain_mode=settings.chain_mode.value,
        default_chain=settings.default_chain,
        has_verification_key=verification_key is not None,
    )

    return verifier
