"""
Test Configuration
==================

Pytest fixtures for zkbridge tests.
"""

import os
from typing import Any

import pytest

# Set test environment
os.environ["ZKBRIDGE_ENVIRONMENT"] = "testing"
os.environ["ZKBRIDGE_CHAIN_MODE"] = "mock"

from zkbridge.blockchain import MockChainClient  # noqa: E402
from zkbridge.contracts.targets import ChainKind  # noqa: E402
from zkbridge.zk.models import Proof, PublicSignals, VerifyingKey  # noqa: E402


# BN254 G2 generator coordinates, reused as proof fixtures
G2_X0 = "10857046999023057135944570762232829481370756359578518086990519993285655852781"
G2_X1 = "11559732032986387107991004021392285783925812861821192530917403151452391805634"
G2_Y0 = "8495653923123431417604973247489272438418190587263600148770280649306958101930"
G2_Y1 = "4082367875863433681332203403145435568316851327593401208105741076214120093531"

A_X = "1368015179489954701390400359078579693043519447331113978918064868415326638035"
A_Y = "9918110051302171585080402603319702774565515993150576347155970296011118125764"
C_X = "21888242871839275222246405745257275088548364400416034343698204186575808495616"
C_Y = "2"

EVM_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
LEDGER_CONTRACT_ID = "CBPBVJJW5NMV4UVEDKSR6UO4DRBNWRQEMYKRYZI3CW6YK3O7HAZA43OI"


@pytest.fixture
def sample_proof_json() -> dict[str, Any]:
    """Proof in the layout emitted by snarkjs."""
    return {
        "pi_a": [A_X, A_Y, "1"],
        "pi_b": [[G2_X0, G2_X1], [G2_Y0, G2_Y1], ["1", "0"]],
        "pi_c": [C_X, C_Y, "1"],
        "protocol": "groth16",
        "curve": "bn128",
    }


@pytest.fixture
def sample_proof(sample_proof_json: dict[str, Any]) -> Proof:
    """Canonical proof built from the snarkjs fixture."""
    return Proof.from_snarkjs(sample_proof_json)


@pytest.fixture
def sample_public_signals() -> list[str]:
    """Public signals: validity flag, then two circuit outputs."""
    return ["1", "18", "2024"]


@pytest.fixture
def sample_signals(sample_public_signals: list[str]) -> PublicSignals:
    return PublicSignals(values=sample_public_signals)


@pytest.fixture
def sample_vkey_json() -> dict[str, Any]:
    """Verification key in the snarkjs layout, for three public inputs."""
    g2 = [[G2_X0, G2_X1], [G2_Y0, G2_Y1], ["1", "0"]]
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": 3,
        "vk_alpha_1": ["1", "2", "1"],
        "vk_beta_2": g2,
        "vk_gamma_2": g2,
        "vk_delta_2": g2,
        "IC": [["1", "2", "1"], [A_X, A_Y, "1"], ["3", "4", "1"], ["5", "6", "1"]],
    }


@pytest.fixture
def sample_vkey(sample_vkey_json: dict[str, Any]) -> VerifyingKey:
    return VerifyingKey.from_json(sample_vkey_json)


@pytest.fixture
def age_credential() -> dict[str, Any]:
    """Sample AgeCredential."""
    return {
        "@context": ["https://www.w3.org/2018/credentials/v1"],
        "id": "urn:uuid:age-1",
        "type": ["VerifiableCredential", "AgeCredential"],
        "issuer": "did:example:gov-registry",
        "issuanceDate": "2024-01-10T09:30:00Z",
        "credentialSubject": {
            "id": "did:example:holder",
            "birthDate": "1990-05-15",
        },
    }


@pytest.fixture
def identity_credential() -> dict[str, Any]:
    """Sample IdentityCredential with an object issuer."""
    return {
        "@context": ["https://www.w3.org/2018/credentials/v1"],
        "type": ["VerifiableCredential", "IdentityCredential"],
        "issuer": {"id": "did:example:passport-office", "name": "Passport Office"},
        "issuanceDate": "2023-06-01T00:00:00Z",
        "credentialSubject": {
            "id": "did:example:holder",
            "givenName": "Alex",
            "familyName": "Doe",
            "nationality": "US",
            "documentType": "passport",
            "documentNumber": "P1234567",
        },
    }


@pytest.fixture
def employment_credential() -> dict[str, Any]:
    """Sample EmploymentCredential."""
    return {
        "@context": ["https://www.w3.org/2018/credentials/v1"],
        "type": ["VerifiableCredential", "EmploymentCredential"],
        "issuer": "did:example:acme",
        "issuanceDate": "2024-02-01T00:00:00Z",
        "credentialSubject": {
            "id": "did:example:holder",
            "employerName": "Acme Corp",
            "employerDID": "did:example:acme",
            "jobTitle": "Engineer",
            "startDate": "2020-03-15",
            "annualSalary": 85000,
            "employmentStatus": "active",
            "industryCode": "technology",
        },
    }


@pytest.fixture
def evm_client() -> MockChainClient:
    """Fresh mock EVM client."""
    return MockChainClient(ChainKind.EVM)


@pytest.fixture
def ledger_client() -> MockChainClient:
    """Fresh mock ledger client."""
    return MockChainClient(ChainKind.LEDGER)
