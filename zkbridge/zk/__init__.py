"""
ZK Module
=========

Groth16 field codec, canonical proof model, input validation and the
external prover wrapper.

The verification dispatcher depends on the contract encoders and lives in
``zkbridge.zk.verifier``; import it from there.

Usage:
    from zkbridge.zk import CircuitProver, ProverConfig
    from zkbridge.zk.verifier import ProofVerifier, VerifierConfig

    # Generate a proof
    prover = CircuitProver(ProverConfig(wasm_path=wasm, zkey_path=zkey))
    bundle = await prover.generate_proof({"age": 25, "minAge": 18})

    # Verify it off-chain
    verifier = ProofVerifier(VerifierConfig.build(verification_key=vkey), local_checker=checker)
    is_valid = await verifier.verify_local(bundle.proof, bundle.public_signals)

Version: 0.1.0
"""

from zkbridge.zk.field import BN254_SCALAR_FIELD, to_field_int
from zkbridge.zk.models import (
    G1Point,
    G2Point,
    Proof,
    ProofBundle,
    ProofMetadata,
    PublicSignals,
    VerificationResult,
    VerifyingKey,
)
from zkbridge.zk.prover import CircuitProver, ProverConfig
from zkbridge.zk.validation import find_invalid_input, validate_inputs


__all__ = [
    # Field
    "BN254_SCALAR_FIELD",
    "to_field_int",
    # Prover
    "CircuitProver",
    "ProverConfig",
    # Validation
    "validate_inputs",
    "find_invalid_input",
    # Models
    "G1Point",
    "G2Point",
    "Proof",
    "ProofBundle",
    "ProofMetadata",
    "PublicSignals",
    "VerificationResult",
    "VerifyingKey",
]
