"""Run the header chain guest in execute or prove mode."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from src.chain.errors import GuestExecutionError
from src.chain.fetcher import HeaderFetcher
from src.chain.models import Commitment, Mode, ProofRequest
from src.chain.payload import encode_payload
from src.chain.prover import Proof
from src.chain.scheduler import fetch_header_range
from src.chain.zkvm import ExecutionReport
from src.helpers.http import create_http_client
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Callable

    from src.chain.prover import ProverCapability
    from src.chain.zkvm import GuestProgram
    from src.helpers.rpc import RPCClient


logger = get_logger(__name__)


class ExecutionResult(BaseModel):
    """Outcome of an execute-mode run."""

    commitment: Commitment
    report: ExecutionReport
    block_count: int

    model_config = ConfigDict(frozen=True)

    @property
    def cycles_per_block(self) -> float | None:
        if not self.block_count:
            return None
        return self.report.total_cycles / self.block_count


class ProveResult(BaseModel):
    """Outcome of a prove-mode run: proof generated and self-verified."""

    commitment: Commitment
    proof: Proof
    proof_generated: bool = True
    proof_verified: bool = True

    model_config = ConfigDict(frozen=True)


class ProofDriver:
    """Drive a prover capability over one guest program."""

    def __init__(self, prover: ProverCapability, program: GuestProgram) -> None:
        self.prover = prover
        self.program = program

    def _commitment(self, public_values: bytes) -> Commitment:
        try:
            return Commitment.from_bytes(public_values)
        except ValueError as e:
            msg = f"guest {self.program.path} committed malformed output: {e}"
            raise GuestExecutionError(msg) from e

    def execute(self, payload: bytes, block_count: int) -> ExecutionResult:
        """Run the guest without proving.

        Raises:
            GuestExecutionError: If the guest aborted or committed anything
                but a 64-byte commitment
        """
        public_values, report = self.prover.execute(self.program, payload)
        commitment = self._commitment(public_values)
        logger.info(
            "Executed %s in %d cycles", self.program.path, report.total_cycles
        )
        return ExecutionResult(
            commitment=commitment, report=report, block_count=block_count
        )

    def prove(self, payload: bytes) -> ProveResult:
        """Generate a proof and verify it against the derived verifying key.

        Raises:
            ProofGenerationError: If no proof could be generated
            ProofVerificationError: If the fresh proof does not verify
            GuestExecutionError: If the proven output is not a 64-byte commitment
        """
        pk, vk = self.prover.setup(self.program)

        proof = self.prover.prove(pk, payload)
        logger.info("Generated proof for %s", self.program.path)

        self.prover.verify(proof, vk)
        logger.info("Verified proof for %s", self.program.path)

        return ProveResult(
            commitment=self._commitment(proof.public_values), proof=proof
        )

    def run(
        self, payload: bytes, mode: Mode, block_count: int
    ) -> ExecutionResult | ProveResult:
        if mode is Mode.EXECUTE:
            return self.execute(payload, block_count)
        return self.prove(payload)


async def attest_range(
    request: ProofRequest,
    rpc: RPCClient,
    driver: ProofDriver,
    *,
    on_chunk: Callable[[int], None] | None = None,
) -> ExecutionResult | ProveResult:
    """Fetch the requested headers and run the driver over them.

    Raises:
        MissingBlockError: If any block of the range is missing
        EmptySequenceError: If the range is empty
        HeaderChainError: Any guest or proof failure
    """
    async with create_http_client(timeout=rpc.timeout) as client:
        fetcher = HeaderFetcher(rpc, client)
        headers = await fetch_header_range(
            fetcher,
            request.start,
            request.end,
            request.chunk_size,
            on_chunk=on_chunk,
        )

    payload = encode_payload(headers)
    return driver.run(payload, request.mode, len(headers))


__all__ = [
    "ExecutionResult",
    "ProofDriver",
    "ProveResult",
    "attest_range",
]
