"""Tests for the execute/prove driver and the end-to-end range attestation."""

from __future__ import annotations

import pytest

from typing import TYPE_CHECKING

from src.chain.driver import ExecutionResult, ProofDriver, ProveResult, attest_range
from src.chain.errors import (
    EmptySequenceError,
    GuestExecutionError,
    MissingBlockError,
    ProofGenerationError,
    ProofVerificationError,
)
from src.chain.hashing import keccak_header_hash
from src.chain.models import Mode, ProofRequest
from src.chain.payload import encode_payload
from src.chain.prover import MockProver, Proof, ProvingKey
from src.chain.zkvm import ExecutionReport, GuestEnv, load_guest_program
from src.helpers.rpc import RPCClient


if TYPE_CHECKING:
    from collections.abc import Callable

    from src.chain.models import BlockHeader


def commit_half(env: GuestEnv) -> None:
    env.output.commit(bytes(32))


@pytest.fixture
def driver() -> ProofDriver:
    return ProofDriver(MockProver(), load_guest_program("src.chain.guest:main"))


class TamperingProver(MockProver):
    """Produces proofs whose public values are altered after sealing."""

    def prove(self, pk: ProvingKey, payload: bytes) -> Proof:
        proof = super().prove(pk, payload)
        return proof.model_copy(update={"public_values": bytes(64)})


class TestProofDriver:
    """Tests for ProofDriver class."""

    def test_execute(
        self, driver: ProofDriver, make_chain: Callable[..., list[BlockHeader]]
    ) -> None:
        """Test execute mode reports commitment and cycles."""
        headers = make_chain(4)

        result = driver.execute(encode_payload(headers), block_count=4)

        assert isinstance(result, ExecutionResult)
        assert result.commitment.start_hash == headers[0].parent_hash
        assert result.commitment.end_hash == keccak_header_hash(headers[-1])
        assert result.report.total_cycles > 0
        assert result.cycles_per_block == result.report.total_cycles / 4

    def test_prove(
        self, driver: ProofDriver, make_chain: Callable[..., list[BlockHeader]]
    ) -> None:
        """Test prove mode generates and verifies a proof."""
        headers = make_chain(4)

        result = driver.prove(encode_payload(headers))

        assert isinstance(result, ProveResult)
        assert isinstance(result.proof, Proof)
        assert result.proof_generated
        assert result.proof_verified
        assert result.commitment.end_hash == keccak_header_hash(headers[-1])

    def test_modes_agree_on_commitment(
        self, driver: ProofDriver, make_chain: Callable[..., list[BlockHeader]]
    ) -> None:
        """Test execute and prove commit to the same hashes."""
        payload = encode_payload(make_chain(6))

        executed = driver.run(payload, Mode.EXECUTE, 6)
        proved = driver.run(payload, Mode.PROVE, 6)

        assert executed.commitment == proved.commitment

    def test_execute_broken_chain(
        self, driver: ProofDriver, make_chain: Callable[..., list[BlockHeader]]
    ) -> None:
        """Test execute mode surfaces the guest abort."""
        headers = make_chain(3)

        with pytest.raises(GuestExecutionError):
            driver.execute(encode_payload([headers[0], headers[2]]), block_count=2)

    @pytest.mark.parametrize("mode", [Mode.EXECUTE, Mode.PROVE])
    def test_malformed_commitment(
        self, mode: Mode, make_chain: Callable[..., list[BlockHeader]]
    ) -> None:
        """Test a guest committing 32 bytes is reported as a guest failure."""
        driver = ProofDriver(MockProver(), load_guest_program(f"{__name__}:commit_half"))

        with pytest.raises(GuestExecutionError, match="malformed output"):
            driver.run(encode_payload(make_chain(2)), mode, 2)

    def test_verification_failure(
        self, make_chain: Callable[..., list[BlockHeader]]
    ) -> None:
        """Test a proof that does not verify is reported."""
        driver = ProofDriver(
            TamperingProver(), load_guest_program("src.chain.guest:main")
        )

        with pytest.raises(ProofVerificationError):
            driver.prove(encode_payload(make_chain(2)))


class TestExecutionResult:
    """Tests for ExecutionResult model."""

    def test_cycles_per_block_without_blocks(self) -> None:
        """Test the per-block figure is omitted for zero blocks."""
        result = ExecutionResult(
            commitment={"start_hash": bytes(32), "end_hash": bytes(32)},
            report=ExecutionReport(total_cycles=100),
            block_count=0,
        )

        assert result.cycles_per_block is None


class TestAttestRange:
    """Tests for attest_range function."""

    @pytest.mark.asyncio
    async def test_execute_range(
        self,
        rpc_url: str,
        driver: ProofDriver,
        make_chain: Callable[..., list[BlockHeader]],
        serve_headers: Callable[[list[BlockHeader]], list[int]],
    ) -> None:
        """Test [100, 105) in chunks of 2 commits the chain's end points."""
        headers = make_chain(5, start=100, parent_hash=b"\x44" * 32)
        requested = serve_headers(headers)
        request = ProofRequest(start=100, end=105, chunk_size=2, mode=Mode.EXECUTE)

        result = await attest_range(request, RPCClient(rpc_url), driver)

        assert isinstance(result, ExecutionResult)
        assert result.block_count == 5
        assert result.commitment.start_hash == b"\x44" * 32
        assert result.commitment.end_hash == keccak_header_hash(headers[-1])
        assert sorted(requested) == list(range(100, 105))

    @pytest.mark.asyncio
    async def test_prove_range(
        self,
        rpc_url: str,
        driver: ProofDriver,
        make_chain: Callable[..., list[BlockHeader]],
        serve_headers: Callable[[list[BlockHeader]], list[int]],
    ) -> None:
        """Test prove mode over a fetched range."""
        headers = make_chain(3, start=20_000_000)
        serve_headers(headers)
        request = ProofRequest(
            start=20_000_000, end=20_000_003, chunk_size=50, mode=Mode.PROVE
        )

        result = await attest_range(request, RPCClient(rpc_url), driver)

        assert isinstance(result, ProveResult)
        assert result.commitment.end_hash == keccak_header_hash(headers[-1])

    @pytest.mark.asyncio
    async def test_reports_progress(
        self,
        rpc_url: str,
        driver: ProofDriver,
        make_chain: Callable[..., list[BlockHeader]],
        serve_headers: Callable[[list[BlockHeader]], list[int]],
    ) -> None:
        """Test on_chunk sees every chunk."""
        serve_headers(make_chain(5, start=100))
        request = ProofRequest(start=100, end=105, chunk_size=2, mode=Mode.EXECUTE)
        sizes: list[int] = []

        await attest_range(request, RPCClient(rpc_url), driver, on_chunk=sizes.append)

        assert sizes == [2, 2, 1]

    @pytest.mark.asyncio
    async def test_missing_block(
        self,
        rpc_url: str,
        driver: ProofDriver,
        make_chain: Callable[..., list[BlockHeader]],
        serve_headers: Callable[[list[BlockHeader]], list[int]],
    ) -> None:
        """Test a block the node lacks aborts the run."""
        headers = make_chain(4, start=100)
        serve_headers([h for h in headers if h.number != 102])
        request = ProofRequest(start=100, end=104, chunk_size=2, mode=Mode.EXECUTE)

        with pytest.raises(MissingBlockError, match="missing block 102"):
            await attest_range(request, RPCClient(rpc_url), driver)

    @pytest.mark.asyncio
    async def test_broken_link_in_prove_mode(
        self,
        rpc_url: str,
        driver: ProofDriver,
        make_header: Callable[..., BlockHeader],
        make_chain: Callable[..., list[BlockHeader]],
        serve_headers: Callable[[list[BlockHeader]], list[int]],
    ) -> None:
        """Test a node serving an unlinked header yields no proof."""
        headers = make_chain(3, start=100)
        headers[2] = make_header(102, b"\x66" * 32)
        serve_headers(headers)
        request = ProofRequest(start=100, end=103, chunk_size=3, mode=Mode.PROVE)

        with pytest.raises(ProofGenerationError):
            await attest_range(request, RPCClient(rpc_url), driver)

    @pytest.mark.asyncio
    async def test_empty_range(self, rpc_url: str, driver: ProofDriver) -> None:
        """Test an empty range fails before reaching the guest."""
        request = ProofRequest(start=100, end=100, chunk_size=2, mode=Mode.EXECUTE)

        with pytest.raises(EmptySequenceError):
            await attest_range(request, RPCClient(rpc_url), driver)
