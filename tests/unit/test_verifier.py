"""
Unit tests for chain targets and the verification dispatcher.
"""

import asyncio
import json
import subprocess
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from tests.conftest import EVM_ADDRESS, LEDGER_CONTRACT_ID
from zkbridge.blockchain import ChainClient, ChainRequest, MockChainClient
from zkbridge.config.settings import ChainMode, Settings
from zkbridge.contracts.targets import ChainKind, EVMTarget, LedgerTarget, parse_chain_target
from zkbridge.errors import (
    ChainClientError,
    ConfigurationError,
    ShapeError,
    UnsupportedChainError,
)
from zkbridge.zk.models import Proof, PublicSignals, VerifyingKey
from zkbridge.zk.verifier import ProofVerifier, SnarkjsProofChecker, VerifierConfig, build_verifier


class FailingClient(ChainClient):
    """Chain client whose submissions always fail."""

    def __init__(self, error: BaseException, kind: ChainKind = ChainKind.EVM) -> None:
        self._error = error
        self._kind = kind

    @property
    def kind(self) -> ChainKind:
        return self._kind

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def health_check(self) -> dict[str, Any]:
        return {"status": "unhealthy"}

    async def submit(self, request: ChainRequest) -> dict[str, Any]:
        raise self._error


class StaticClient(FailingClient):
    """Chain client returning a fixed raw response."""

    def __init__(self, response: Any, kind: ChainKind = ChainKind.EVM) -> None:
        super().__init__(RuntimeError("unused"), kind)
        self._response = response

    async def submit(self, request: ChainRequest) -> dict[str, Any]:
        return self._response


class RecordingChecker:
    """Local pairing check stub."""

    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.calls: list[tuple[VerifyingKey, Proof, PublicSignals]] = []

    async def check(self, verifying_key: VerifyingKey, proof: Proof, public_signals: PublicSignals) -> bool:
        self.calls.append((verifying_key, proof, public_signals))
        return self.result


class TestChainTarget:
    """Tests for parse_chain_target."""

    def test_variant_tags(self) -> None:
        """Test decoding by variant name."""
        evm_target = parse_chain_target({"chain": "evm", "contractAddress": EVM_ADDRESS})
        ledger_target = parse_chain_target({"chain": "ledger", "contractId": LEDGER_CONTRACT_ID})

        assert isinstance(evm_target, EVMTarget)
        assert evm_target.contract_address == EVM_ADDRESS
        assert isinstance(ledger_target, LedgerTarget)
        assert ledger_target.network == "testnet"

    def test_chain_name_aliases(self) -> None:
        """Test that chain names select the variant and network."""
        polygon = parse_chain_target({"chain": "polygon", "contractAddress": EVM_ADDRESS})
        stellar = parse_chain_target({"chain": "stellar", "contractId": LEDGER_CONTRACT_ID})

        assert isinstance(polygon, EVMTarget)
        assert polygon.network == "polygon"
        assert isinstance(stellar, LedgerTarget)

    def test_unknown_chain(self) -> None:
        """Test that an unknown tag names the chain."""
        with pytest.raises(UnsupportedChainError, match="solana"):
            parse_chain_target({"chain": "solana"})

    def test_unknown_field(self) -> None:
        """Test that fields of the other variant are rejected."""
        with pytest.raises(ShapeError):
            parse_chain_target({"chain": "evm", "contractId": LEDGER_CONTRACT_ID})

    def test_model_passthrough(self) -> None:
        """Test that models are returned as given."""
        target = EVMTarget(contract_address=EVM_ADDRESS)

        assert parse_chain_target(target) is target


class TestVerifyOnChain:
    """Tests for ProofVerifier.verify_on_chain."""

    @pytest.mark.asyncio
    async def test_evm_verification(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        evm_client: MockChainClient,
    ) -> None:
        """Test a successful EVM verification through the mock client."""
        verifier = ProofVerifier(evm_client=evm_client)

        result = await verifier.verify_on_chain(
            sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
        )

        assert result.valid is True
        assert result.chain == "evm"
        assert result.tx_hash.startswith("0x")
        assert result.gas_used > 0
        assert result.block_number is not None

        request = evm_client.submissions[0]
        assert request.contract == EVM_ADDRESS
        assert request.function == "verifyProof"
        assert request.payload["functionSignature"].startswith("verifyProof(")

    @pytest.mark.asyncio
    async def test_evm_missing_address(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        evm_client: MockChainClient,
    ) -> None:
        """Test that an EVM target without an address is a configuration error."""
        verifier = ProofVerifier(evm_client=evm_client)

        with pytest.raises(ConfigurationError, match="contractAddress"):
            await verifier.verify_on_chain(sample_proof, sample_signals, {"chain": "evm"})

        assert evm_client.submissions == []

    @pytest.mark.asyncio
    async def test_ledger_verification(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        ledger_client: MockChainClient,
    ) -> None:
        """Test a ledger verification carrying structured args and the CLI command."""
        verifier = ProofVerifier(ledger_client=ledger_client)
        ledger_client.set_accept(False)

        result = await verifier.verify_on_chain(
            sample_proof, sample_signals, {"chain": "stellar", "contractId": LEDGER_CONTRACT_ID}
        )

        assert result.valid is False
        assert result.chain == "ledger"
        assert result.gas_used is None
        assert result.block_number is not None

        payload = ledger_client.submissions[0].payload
        assert payload["args"]["public_inputs"] == sample_signals.to_hex()
        assert "-- verify" in payload["cliCommand"]

    @pytest.mark.asyncio
    async def test_ledger_missing_contract_id(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        ledger_client: MockChainClient,
    ) -> None:
        """Test that a ledger target without a contract ID is a configuration error."""
        verifier = ProofVerifier(ledger_client=ledger_client)

        with pytest.raises(ConfigurationError, match="contractId not configured"):
            await verifier.verify_on_chain(sample_proof, sample_signals, {"chain": "ledger"})

    @pytest.mark.asyncio
    async def test_unsupported_chain(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that an unknown chain fails before any client is needed."""
        with pytest.raises(UnsupportedChainError):
            await ProofVerifier().verify_on_chain(sample_proof, sample_signals, {"chain": "bitcoin"})

    @pytest.mark.asyncio
    async def test_missing_client(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that a target without a matching client is a configuration error."""
        verifier = ProofVerifier()

        with pytest.raises(ConfigurationError, match="evm_client"):
            await verifier.verify_on_chain(
                sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
            )

    @pytest.mark.asyncio
    async def test_missing_target(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that a call without any target fails."""
        with pytest.raises(ConfigurationError, match="target"):
            await ProofVerifier().verify_on_chain(sample_proof, sample_signals)

    @pytest.mark.asyncio
    async def test_default_target(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        evm_client: MockChainClient,
    ) -> None:
        """Test that the configured target is used when none is passed."""
        config = VerifierConfig.build(target={"chain": "base", "contractAddress": EVM_ADDRESS})
        verifier = ProofVerifier(config, evm_client=evm_client)

        result = await verifier.verify_on_chain(sample_proof, sample_signals)

        assert result.valid is True
        assert evm_client.submissions[0].network == "base"

    @pytest.mark.asyncio
    async def test_client_failure_is_wrapped(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that client errors become ChainClientError with the cause kept."""
        cause = ConnectionError("rpc unreachable")
        verifier = ProofVerifier(evm_client=FailingClient(cause))

        with pytest.raises(ChainClientError) as exc_info:
            await verifier.verify_on_chain(
                sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
            )

        assert exc_info.value.__cause__ is cause
        assert "rpc unreachable" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_cancellation_not_wrapped(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that cancellation passes through unchanged."""
        verifier = ProofVerifier(evm_client=FailingClient(asyncio.CancelledError()))

        with pytest.raises(asyncio.CancelledError):
            await verifier.verify_on_chain(
                sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
            )

    @pytest.mark.asyncio
    async def test_malformed_response(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that a response without a boolean verdict is a client error."""
        verifier = ProofVerifier(evm_client=StaticClient({"valid": "yes"}))

        with pytest.raises(ChainClientError, match="verdict"):
            await verifier.verify_on_chain(
                sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
            )

    @pytest.mark.asyncio
    async def test_response_quantities_normalized(
        self, sample_proof: Proof, sample_signals: PublicSignals
    ) -> None:
        """Test that hex quantities and raw hash bytes are accepted."""
        verifier = ProofVerifier(
            evm_client=StaticClient(
                {"valid": True, "txHash": b"\x12" * 32, "gasUsed": "0x5208", "blockNumber": "0x10"}
            )
        )

        result = await verifier.verify_on_chain(
            sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
        )

        assert result.valid is True
        assert result.tx_hash == "0x" + "12" * 32
        assert result.gas_used == 21000
        assert result.block_number == 16

    @pytest.mark.asyncio
    async def test_decimal_quantity_string(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that decimal strings are read as quantities."""
        verifier = ProofVerifier(evm_client=StaticClient({"valid": False, "gasUsed": "21000"}))

        result = await verifier.verify_on_chain(
            sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
        )

        assert result.valid is False
        assert result.gas_used == 21000
        assert result.block_number is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("gas_used", ["lots", [21000], 2.5])
    async def test_malformed_quantity(
        self, sample_proof: Proof, sample_signals: PublicSignals, gas_used: Any
    ) -> None:
        """Test that an unreadable quantity is a client error."""
        verifier = ProofVerifier(evm_client=StaticClient({"valid": True, "gasUsed": gas_used}))

        with pytest.raises(ChainClientError, match="malformed response") as exc_info:
            await verifier.verify_on_chain(
                sample_proof, sample_signals, {"chain": "evm", "contractAddress": EVM_ADDRESS}
            )

        assert exc_info.value.chain == "evm"

    def test_client_kind_checked(self, ledger_client: MockChainClient) -> None:
        """Test that a ledger client cannot be injected as the EVM client."""
        with pytest.raises(ConfigurationError, match="evm_client"):
            ProofVerifier(evm_client=ledger_client)


class TestVerifyLocal:
    """Tests for off-chain verification."""

    @pytest.mark.asyncio
    async def test_requires_verification_key(self, sample_proof: Proof, sample_signals: PublicSignals) -> None:
        """Test that a key must be configured."""
        verifier = ProofVerifier(local_checker=RecordingChecker())

        with pytest.raises(ConfigurationError, match="verification key not configured"):
            await verifier.verify_local(sample_proof, sample_signals)

    @pytest.mark.asyncio
    async def test_delegates_to_checker(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        sample_vkey: VerifyingKey,
    ) -> None:
        """Test that the pairing check receives the configured key."""
        checker = RecordingChecker(result=True)
        verifier = ProofVerifier(VerifierConfig.build(verification_key=sample_vkey), local_checker=checker)

        assert await verifier.verify_local(sample_proof, sample_signals) is True
        assert checker.calls == [(sample_vkey, sample_proof, sample_signals)]

    @pytest.mark.asyncio
    async def test_signal_count_mismatch(self, sample_proof: Proof, sample_vkey: VerifyingKey) -> None:
        """Test that the signal count must match the key."""
        verifier = ProofVerifier(
            VerifierConfig.build(verification_key=sample_vkey), local_checker=RecordingChecker()
        )

        with pytest.raises(ShapeError, match="expects 3"):
            await verifier.verify_local(sample_proof, ["1"])

    @pytest.mark.asyncio
    async def test_verify_wraps_result(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        sample_vkey_json: dict[str, Any],
    ) -> None:
        """Test that verify() returns a VerificationResult for off-chain checks."""
        verifier = ProofVerifier(local_checker=RecordingChecker(result=False)).with_verification_key(
            sample_vkey_json
        )

        result = await verifier.verify(sample_proof, sample_signals)

        assert result.valid is False
        assert result.chain is None


class TestReconfiguration:
    """Tests for immutable reconfiguration."""

    def test_with_verification_key_returns_new_instance(self, sample_vkey: VerifyingKey) -> None:
        """Test that the original verifier is unchanged."""
        original = ProofVerifier()
        updated = original.with_verification_key(sample_vkey)

        assert original.config.verification_key is None
        assert updated.config.verification_key == sample_vkey

    @pytest.mark.asyncio
    async def test_with_target_keeps_clients(
        self,
        sample_proof: Proof,
        sample_signals: PublicSignals,
        evm_client: MockChainClient,
    ) -> None:
        """Test that clients carry over to the reconfigured verifier."""
        verifier = ProofVerifier(evm_client=evm_client).with_target(
            {"chain": "evm", "contractAddress": EVM_ADDRESS}
        )

        result = await verifier.verify(sample_proof, sample_signals, on_chain=True)

        assert result.valid is True
        assert len(evm_client.submissions) == 1

    def test_config_frozen(self) -> None:
        """Test that the config cannot be mutated in place."""
        config = VerifierConfig()

        with pytest.raises(ValidationError):
            config.target = EVMTarget(contract_address=EVM_ADDRESS)  # type: ignore[misc]


class TestBuildVerifier:
    """Tests for building a verifier from settings."""

    @pytest.mark.asyncio
    async def test_mock_mode(
        self,
        tmp_path: Path,
        sample_vkey_json: dict[str, Any],
        sample_proof: Proof,
        sample_signals: PublicSignals,
    ) -> None:
        """Test that mock mode injects mock clients and loads the key."""
        vkey_path = tmp_path / "verification_key.json"
        vkey_path.write_text(json.dumps(sample_vkey_json))

        settings = Settings(
            chain_mode=ChainMode.MOCK,
            default_chain="ledger",
            circuit={"vkey_path": vkey_path},
            ledger={"contract_id": LEDGER_CONTRACT_ID},
        )
        verifier = build_verifier(settings, local_checker=RecordingChecker())

        assert verifier.config.verification_key is not None
        assert isinstance(verifier.config.target, LedgerTarget)

        result = await verifier.verify_on_chain(sample_proof, sample_signals)
        assert result.chain == "ledger"

    def test_missing_vkey_file(self, tmp_path: Path) -> None:
        """Test that a configured but absent key file is reported."""
        settings = Settings(circuit={"vkey_path": tmp_path / "missing.json"})

        with pytest.raises(ConfigurationError, match="Verification key not found"):
            build_verifier(settings)


class TestSnarkjsProofChecker:
    """Tests for the snarkjs-backed pairing check."""

    @pytest.mark.asyncio
    async def test_verdict_from_output(
        self,
        monkeypatch: pytest.MonkeyPatch,
        sample_vkey: VerifyingKey,
        sample_proof: Proof,
        sample_signals: PublicSignals,
    ) -> None:
        """Test that the verdict is read from snarkjs stdout."""
        calls: list[list[str]] = []

        def run(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
            calls.append(args)
            return subprocess.CompletedProcess(args, 0, stdout="[INFO]  snarkJS: OK!\n", stderr="")

        monkeypatch.setattr(subprocess, "run", run)

        assert await SnarkjsProofChecker("snarkjs").check(sample_vkey, sample_proof, sample_signals) is True
        assert calls[0][:3] == ["snarkjs", "groth16", "verify"]

    @pytest.mark.asyncio
    async def test_snarkjs_not_installed(
        self,
        monkeypatch: pytest.MonkeyPatch,
        sample_vkey: VerifyingKey,
        sample_proof: Proof,
        sample_signals: PublicSignals,
    ) -> None:
        """Test that a missing snarkjs executable is a configuration error."""

        def missing(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess:
            raise FileNotFoundError(2, "No such file or directory", "npx")

        monkeypatch.setattr(subprocess, "run", missing)

        with pytest.raises(ConfigurationError, match="snarkjs could not be started") as exc_info:
            await SnarkjsProofChecker().check(sample_vkey, sample_proof, sample_signals)

        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
