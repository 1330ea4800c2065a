"""Metered execution environment for guest programs.

A guest is a plain function `entry(env: GuestEnv) -> None`. It sees the
world only through its environment: an input channel over the payload, a
header hash capability and an output channel that accepts exactly one
commit. Every environment call is charged to a cycle meter using a fixed
cost model, so the same payload always costs the same number of cycles.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel

from src.chain.errors import GuestExecutionError
from src.chain.hashing import encode_header, keccak256
from src.chain.payload import PayloadReader
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Callable

    from src.chain.models import BlockHeader


logger = get_logger(__name__)

WORD_SIZE = 4
KECCAK_RATE = 136

# Cost model
READ_WORD_CYCLES = 1
COMMIT_WORD_CYCLES = 1
SYSCALL_CYCLES = 50
KECCAK_PERMUTATION_CYCLES = 2_000


def _words(size: int) -> int:
    return -(-size // WORD_SIZE)


class ExecutionReport(BaseModel):
    """Performance counters of one guest run."""

    total_cycles: int = 0
    syscalls: int = 0
    hashes: int = 0
    bytes_read: int = 0
    bytes_committed: int = 0


class CycleMeter:
    """Accumulates cycle costs for a single run."""

    def __init__(self) -> None:
        self.report = ExecutionReport()

    def syscall(self, cycles: int) -> None:
        self.report.syscalls += 1
        self.report.total_cycles += SYSCALL_CYCLES + cycles


class InputChannel:
    """Read side of the guest boundary."""

    def __init__(self, payload: bytes, meter: CycleMeter) -> None:
        self._reader = PayloadReader(payload)
        self._meter = meter

    def _charge(self, start: int) -> None:
        size = self._reader.bytes_read - start
        self._meter.report.bytes_read += size
        self._meter.syscall(_words(size) * READ_WORD_CYCLES)

    def read_u32(self) -> int:
        start = self._reader.bytes_read
        value = self._reader.read_u32()
        self._charge(start)
        return value

    def read_header(self) -> BlockHeader:
        start = self._reader.bytes_read
        header = self._reader.read_header()
        self._charge(start)
        return header


class OutputChannel:
    """Write side of the guest boundary: exactly one commit per run."""

    def __init__(self, meter: CycleMeter) -> None:
        self._meter = meter
        self.public_values: bytes | None = None

    def commit(self, data: bytes) -> None:
        if self.public_values is not None:
            msg = "guest committed output more than once"
            raise RuntimeError(msg)
        self.public_values = bytes(data)
        self._meter.report.bytes_committed += len(data)
        self._meter.syscall(_words(len(data)) * COMMIT_WORD_CYCLES)


class GuestEnv:
    """Everything a guest program may touch."""

    def __init__(self, payload: bytes) -> None:
        self.meter = CycleMeter()
        self.input = InputChannel(payload, self.meter)
        self.output = OutputChannel(self.meter)

    def hash_header(self, header: BlockHeader) -> bytes:
        """keccak256(rlp(header)), charged per keccak permutation."""
        preimage = encode_header(header)
        self.meter.report.hashes += 1
        self.meter.syscall(
            (len(preimage) // KECCAK_RATE + 1) * KECCAK_PERMUTATION_CYCLES
        )
        return keccak256(preimage)


@dataclass(frozen=True)
class GuestProgram:
    """A loaded guest entry point and the digest identifying it."""

    path: str
    entry: Callable[[GuestEnv], None]
    digest: bytes


def load_guest_program(path: str) -> GuestProgram:
    """Resolve "module:function" to a GuestProgram.

    The digest is keccak256 over the import path and the module's source
    file, so editing the guest changes the keys derived for it.

    Raises:
        ValueError: If the path is malformed or does not name a callable
    """
    module_name, _, func_name = path.partition(":")
    if not module_name or not func_name:
        msg = f"Guest program must look like 'module:function', got {path!r}"
        raise ValueError(msg)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        msg = f"Cannot import guest module {module_name!r}: {e}"
        raise ValueError(msg) from e

    entry = getattr(module, func_name, None)
    if not callable(entry):
        msg = f"Guest module {module_name!r} has no callable {func_name!r}"
        raise ValueError(msg)

    source = b""
    if module.__file__ is not None:
        source = Path(module.__file__).read_bytes()

    return GuestProgram(
        path=path, entry=entry, digest=keccak256(path.encode() + b"\x00" + source)
    )


def execute_program(
    program: GuestProgram, payload: bytes
) -> tuple[bytes, ExecutionReport]:
    """Run a guest to completion.

    Returns:
        The committed public values and the run's performance counters

    Raises:
        GuestExecutionError: If the guest raised, or did not commit output
    """
    env = GuestEnv(payload)
    try:
        program.entry(env)
    except Exception as e:
        logger.debug("Guest %s aborted: %s", program.path, e)
        msg = f"guest {program.path} aborted: {e}"
        raise GuestExecutionError(msg) from e

    if env.output.public_values is None:
        msg = f"guest {program.path} exited without committing output"
        raise GuestExecutionError(msg)

    return env.output.public_values, env.meter.report


__all__ = [
    "ExecutionReport",
    "GuestEnv",
    "GuestProgram",
    "InputChannel",
    "OutputChannel",
    "execute_program",
    "load_guest_program",
]
