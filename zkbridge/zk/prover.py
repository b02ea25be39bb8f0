"""
Groth16 Proof Generation
========================

Thin async wrapper around the external prover.

The witness computation and proving run in ``snarkjs groth16 fullprove``,
called via subprocess off the event loop. This module only validates inputs,
manages temporary files and parses the output through the canonical model.

Version: 0.1.0
"""

import asyncio
import json
import shlex
import subprocess
import tempfile
import time
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from zkbridge.errors import ConfigurationError, EncodingError, ProverError, ShapeError
from zkbridge.logging import get_logger
from zkbridge.zk.models import Proof, ProofBundle, ProofMetadata, PublicSignals
from zkbridge.zk.validation import find_invalid_input


logger = get_logger(__name__)


class ProverConfig(BaseModel):
    """Immutable prover configuration."""

    model_config = ConfigDict(frozen=True)

    wasm_path: Path | None = None
    zkey_path: Path | None = None
    snarkjs_command: str = "npx snarkjs"
    circuit_name: str | None = None
    validity_index: int | None = 0

    @property
    def resolved_circuit_name(self) -> str:
        """Circuit name, defaulting to the WASM file stem."""
        if self.circuit_name:
            return self.circuit_name
        return self.wasm_path.stem if self.wasm_path else "circuit"


class CircuitProver:
    """
    Groth16 proof generator backed by snarkjs.

    Usage:
        prover = CircuitProver(
            ProverConfig(wasm_path="build/kyc.wasm", zkey_path="build/kyc.zkey")
        )

        bundle = await prover.generate_proof({"age": 25, "minAge": 18})
        print(bundle.is_valid_claim)
    """

    def __init__(self, config: ProverConfig | None = None):
        """
        Initialize the prover.

        Args:
            config: Circuit artifact paths. An empty config is allowed; it
                fails at proof time with ConfigurationError.
        """
        self._config = config or ProverConfig()

    @property
    def config(self) -> ProverConfig:
        return self._config

    def with_circuit_paths(self, wasm_path: str | Path, zkey_path: str | Path) -> "CircuitProver":
        """Return a new prover bound to other circuit artifacts."""
        return CircuitProver(
            self._config.model_copy(
                update={"wasm_path": Path(wasm_path), "zkey_path": Path(zkey_path)}
            )
        )

    def _check_inputs(self, inputs: Any) -> None:
        if not isinstance(inputs, Mapping):
            raise ShapeError(f"Circuit inputs must be a mapping, got {type(inputs).__name__}")
        bad = find_invalid_input(inputs)
        if bad is not None:
            raise EncodingError(
                f"Circuit input {bad!r} must be a non-negative integer or a list of them"
            )

    def _check_paths(self) -> tuple[Path, Path]:
        wasm_path, zkey_path = self._config.wasm_path, self._config.zkey_path
        if wasm_path is None or zkey_path is None:
            raise ConfigurationError("circuit paths")
        if not wasm_path.exists():
            raise ConfigurationError("wasm_path", f"WASM file not found: {wasm_path}")
        if not zkey_path.exists():
            raise ConfigurationError("zkey_path", f"zkey file not found: {zkey_path}")
        return wasm_path, zkey_path

    async def _run_snarkjs(
        self,
        circuit_name: str,
        inputs: Mapping[str, Any],
        wasm_path: Path,
        zkey_path: Path,
    ) -> tuple[dict, list[str], int]:
        """
        Run snarkjs to generate a proof.

        Returns:
            Tuple of (proof_json, public_signals, proving_time_ms)
        """
        with tempfile.TemporaryDirectory(prefix="zkbridge-prove-") as tmp:
            workdir = Path(tmp)
            input_file = workdir / "input.json"
            proof_file = workdir / "proof.json"
            public_file = workdir / "public.json"

            with open(input_file, "w") as f:
                json.dump(dict(inputs), f)

            start_time = time.time()

            try:
                result = await asyncio.to_thread(
                    subprocess.run,
                    [
                        *shlex.split(self._config.snarkjs_command),
                        "groth16",
                        "fullprove",
                        str(input_file),
                        str(wasm_path),
                        str(zkey_path),
                        str(proof_file),
                        str(public_file),
                    ],
                    capture_output=True,
                    text=True,
                )
            except OSError as e:
                logger.error("snarkjs_launch_failed", error=str(e), circuit=circuit_name)
                raise ProverError(circuit_name, str(e)) from e

            proving_time_ms = int((time.time() - start_time) * 1000)

            if result.returncode != 0:
                logger.error(
                    "snarkjs_proof_generation_failed",
                    stderr=result.stderr,
                    circuit=circuit_name,
                )
                raise ProverError(circuit_name, result.stderr.strip())

            try:
                with open(proof_file) as f:
                    proof_json = json.load(f)
                with open(public_file) as f:
                    public_signals = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ProverError(circuit_name, f"unreadable prover output: {e}") from e

        return proof_json, public_signals, proving_time_ms

    async def generate_proof(self, inputs: Mapping[str, Any]) -> ProofBundle:
        """
        Generate a Groth16 proof for the configured circuit.

        Args:
            inputs: Circuit input signals by name

        Returns:
            ProofBundle with the proof, public signals and prover metadata

        Raises:
            ShapeError: If inputs is not a mapping
            EncodingError: If an input is not a non-negative integer
            ConfigurationError: If circuit paths are unset or missing on disk
            ProverError: If snarkjs exits with an error
        """
        self._check_inputs(inputs)
        wasm_path, zkey_path = self._check_paths()
        circuit_name = self._config.resolved_circuit_name

        proof_json, public_signals, proving_time_ms = await self._run_snarkjs(
            circuit_name, inputs, wasm_path, zkey_path
        )

        bundle = ProofBundle(
            proof=Proof.from_snarkjs(proof_json),
            public_signals=PublicSignals(
                values=public_signals, validity_index=self._config.validity_index
            ),
            metadata=ProofMetadata(
                circuit_name=circuit_name,
                proving_time_ms=proving_time_ms,
            ),
        )

        logger.info(
            "zk_proof_generated",
            circuit=circuit_name,
            proving_time_ms=proving_time_ms,
            public_signals=len(bundle.public_signals),
        )

        return bundle
