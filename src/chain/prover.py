"""Prover capability: key setup, proof generation and proof verification."""

from typing import Protocol

from pydantic import BaseModel, ConfigDict

from src.chain.errors import (
    GuestExecutionError,
    ProofGenerationError,
    ProofVerificationError,
)
from src.chain.hashing import keccak256
from src.chain.zkvm import ExecutionReport, GuestProgram, execute_program
from src.helpers.logging import get_logger

logger = get_logger(__name__)


class ProvingKey(BaseModel):
    program_digest: bytes
    key: bytes

    model_config = ConfigDict(frozen=True)


class VerifyingKey(BaseModel):
    program_digest: bytes
    key: bytes

    model_config = ConfigDict(frozen=True)


class Proof(BaseModel):
    """A proof bound to the public values the guest committed."""

    program_digest: bytes
    public_values: bytes
    seal: bytes

    model_config = ConfigDict(frozen=True)


class ProverCapability(Protocol):
    """The operations the driver needs from a proving backend."""

    def execute(
        self, program: GuestProgram, payload: bytes
    ) -> tuple[bytes, ExecutionReport]: ...

    def setup(self, program: GuestProgram) -> tuple[ProvingKey, VerifyingKey]: ...

    def prove(self, pk: ProvingKey, payload: bytes) -> Proof: ...

    def verify(self, proof: Proof, vk: VerifyingKey) -> None: ...


class MockProver:
    """Prover that runs the guest and seals its output with a keccak digest.

    The seal is keccak256(verifying key || public values). It catches a
    proof checked against the wrong program or carrying altered public
    values, but it is not zero-knowledge and anyone can forge it. Use it
    for development and tests only.
    """

    def __init__(self) -> None:
        self._keys: dict[bytes, tuple[ProvingKey, VerifyingKey]] = {}
        self._programs: dict[bytes, GuestProgram] = {}

    def execute(
        self, program: GuestProgram, payload: bytes
    ) -> tuple[bytes, ExecutionReport]:
        return execute_program(program, payload)

    def setup(self, program: GuestProgram) -> tuple[ProvingKey, VerifyingKey]:
        """Derive (or reuse) the key pair for a program."""
        cached = self._keys.get(program.digest)
        if cached is not None:
            return cached

        logger.debug("Deriving keys for guest %s", program.path)
        keys = (
            ProvingKey(
                program_digest=program.digest,
                key=keccak256(b"pk" + program.digest),
            ),
            VerifyingKey(
                program_digest=program.digest,
                key=keccak256(b"vk" + program.digest),
            ),
        )
        self._keys[program.digest] = keys
        self._programs[program.digest] = program
        return keys

    def prove(self, pk: ProvingKey, payload: bytes) -> Proof:
        """Run the guest and seal its public values.

        Raises:
            ProofGenerationError: If the key is unknown or the guest aborts
        """
        program = self._programs.get(pk.program_digest)
        if program is None:
            msg = "proving key was not produced by this prover's setup"
            raise ProofGenerationError(msg)

        try:
            public_values, report = execute_program(program, payload)
        except GuestExecutionError as e:
            msg = f"failed to generate proof: {e}"
            raise ProofGenerationError(msg) from e

        logger.debug("Proved guest run of %d cycles", report.total_cycles)
        _, vk = self._keys[pk.program_digest]
        return Proof(
            program_digest=pk.program_digest,
            public_values=public_values,
            seal=keccak256(vk.key + public_values),
        )

    def verify(self, proof: Proof, vk: VerifyingKey) -> None:
        """Check a proof against a verifying key.

        Raises:
            ProofVerificationError: If the proof is not for this key or
                its public values were altered
        """
        if proof.program_digest != vk.program_digest:
            msg = "proof was generated for a different program"
            raise ProofVerificationError(msg)
        if proof.seal != keccak256(vk.key + proof.public_values):
            msg = "proof seal does not match its public values"
            raise ProofVerificationError(msg)


PROVERS: dict[str, type[MockProver]] = {
    "mock": MockProver,
}


def get_prover(name: str) -> ProverCapability:
    """Instantiate a prover backend by name.

    Raises:
        ValueError: If no backend has that name
    """
    prover_cls = PROVERS.get(name)
    if prover_cls is None:
        msg = f"Unknown prover {name!r}, expected one of {sorted(PROVERS)}"
        raise ValueError(msg)
    return prover_cls()


__all__ = [
    "MockProver",
    "Proof",
    "ProverCapability",
    "ProvingKey",
    "VerifyingKey",
    "get_prover",
]
