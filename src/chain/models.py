"""Pydantic models for block headers, commitments and proof requests."""

from enum import StrEnum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.helpers.parsers import to_hex

Hash32 = Annotated[bytes, Field(min_length=32, max_length=32)]
Address = Annotated[bytes, Field(min_length=20, max_length=20)]
Bloom = Annotated[bytes, Field(min_length=256, max_length=256)]
Nonce = Annotated[bytes, Field(min_length=8, max_length=8)]
Quantity = Annotated[int, Field(ge=0)]

COMMITMENT_SIZE = 64

# Fork fields appended to the RLP list, in order, only when present
OPTIONAL_HEADER_FIELDS = (
    "base_fee_per_gas",
    "withdrawals_root",
    "blob_gas_used",
    "excess_blob_gas",
    "parent_beacon_block_root",
    "requests_hash",
)

REQUIRED_HEADER_FIELDS = (
    "parent_hash",
    "ommers_hash",
    "beneficiary",
    "state_root",
    "transactions_root",
    "receipts_root",
    "logs_bloom",
    "difficulty",
    "number",
    "gas_limit",
    "gas_used",
    "timestamp",
    "extra_data",
    "mix_hash",
    "nonce",
)


class BlockHeader(BaseModel):
    """Ethereum block header with exactly the fields of its hash preimage."""

    parent_hash: Hash32
    ommers_hash: Hash32
    beneficiary: Address
    state_root: Hash32
    transactions_root: Hash32
    receipts_root: Hash32
    logs_bloom: Bloom
    difficulty: Quantity
    number: Quantity
    gas_limit: Quantity
    gas_used: Quantity
    timestamp: Quantity
    extra_data: bytes
    mix_hash: Hash32
    nonce: Nonce
    base_fee_per_gas: Quantity | None = None
    withdrawals_root: Hash32 | None = None
    blob_gas_used: Quantity | None = None
    excess_blob_gas: Quantity | None = None
    parent_beacon_block_root: Hash32 | None = None
    requests_hash: Hash32 | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_fork_fields(self) -> Self:
        """Fork fields must form a prefix of OPTIONAL_HEADER_FIELDS."""
        missing = None
        for name in OPTIONAL_HEADER_FIELDS:
            if getattr(self, name) is None:
                missing = missing or name
            elif missing is not None:
                msg = f"{name} is set but earlier fork field {missing} is missing"
                raise ValueError(msg)
        return self

    def field_values(self) -> list[int | bytes]:
        """Header values in canonical order, without absent fork fields."""
        values = [getattr(self, name) for name in REQUIRED_HEADER_FIELDS]
        for name in OPTIONAL_HEADER_FIELDS:
            value = getattr(self, name)
            if value is None:
                break
            values.append(value)
        return values


class Commitment(BaseModel):
    """The 64-byte public output of the guest: start hash then end hash."""

    start_hash: Hash32
    end_hash: Hash32

    model_config = ConfigDict(frozen=True)

    def to_bytes(self) -> bytes:
        return self.start_hash + self.end_hash

    @classmethod
    def from_bytes(cls, data: bytes) -> "Commitment":
        if len(data) != COMMITMENT_SIZE:
            msg = f"Commitment must be {COMMITMENT_SIZE} bytes, got {len(data)}"
            raise ValueError(msg)
        return cls(start_hash=data[:32], end_hash=data[32:])

    @property
    def start_hex(self) -> str:
        return to_hex(self.start_hash)

    @property
    def end_hex(self) -> str:
        return to_hex(self.end_hash)


class Mode(StrEnum):
    """Driver mode."""

    EXECUTE = "execute"
    PROVE = "prove"


class ProofRequest(BaseModel):
    """A request to attest headers in the half-open range [start, end)."""

    start: Quantity
    end: Quantity
    chunk_size: int = Field(..., ge=1)
    mode: Mode

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_range(self) -> Self:
        if self.start > self.end:
            msg = f"start ({self.start}) must not be greater than end ({self.end})"
            raise ValueError(msg)
        return self

    @property
    def block_count(self) -> int:
        return self.end - self.start


__all__ = [
    "COMMITMENT_SIZE",
    "OPTIONAL_HEADER_FIELDS",
    "REQUIRED_HEADER_FIELDS",
    "BlockHeader",
    "Commitment",
    "Mode",
    "ProofRequest",
]
