"""Canonical header encoding (RLP) and keccak256 header hashing."""

from collections.abc import Callable

import ethereum_rlp as eth_rlp
from Crypto.Hash import keccak
from ethereum_rlp.exceptions import RLPException
from ethereum_types.numeric import Uint

from src.chain.errors import PayloadDecodeError
from src.chain.models import (
    OPTIONAL_HEADER_FIELDS,
    REQUIRED_HEADER_FIELDS,
    BlockHeader,
)

type HeaderHasher = Callable[[BlockHeader], bytes]

INTEGER_FIELDS = frozenset({
    "difficulty",
    "number",
    "gas_limit",
    "gas_used",
    "timestamp",
    "base_fee_per_gas",
    "blob_gas_used",
    "excess_blob_gas",
})


def keccak256(buffer: bytes) -> bytes:
    """Compute the keccak256 hash of `buffer`."""
    k = keccak.new(digest_bits=256)
    return k.update(buffer).digest()


def encode_header(header: BlockHeader) -> bytes:
    """RLP-encode a header as the list of its canonical field values."""
    return eth_rlp.encode([
        value if isinstance(value, bytes) else Uint(value)
        for value in header.field_values()
    ])


def decode_header(data: bytes) -> BlockHeader:
    """Decode an RLP-encoded header.

    Raises:
        PayloadDecodeError: If `data` is not an RLP list of header fields
    """
    try:
        items = eth_rlp.decode(data)
    except (RLPException, IndexError) as e:
        msg = f"invalid header RLP: {e}"
        raise PayloadDecodeError(msg) from e

    names = REQUIRED_HEADER_FIELDS + OPTIONAL_HEADER_FIELDS
    if (
        isinstance(items, bytes)
        or not len(REQUIRED_HEADER_FIELDS) <= len(items) <= len(names)
        or not all(isinstance(item, bytes) for item in items)
    ):
        msg = f"header RLP must be a flat list of {len(REQUIRED_HEADER_FIELDS)}-{len(names)} fields"
        raise PayloadDecodeError(msg)

    fields = {
        name: int.from_bytes(item, "big") if name in INTEGER_FIELDS else bytes(item)
        for name, item in zip(names, items, strict=False)
    }
    try:
        return BlockHeader(**fields)
    except ValueError as e:
        msg = f"invalid header fields: {e}"
        raise PayloadDecodeError(msg) from e


def keccak_header_hash(header: BlockHeader) -> bytes:
    """Hash a header the way Ethereum does: keccak256(rlp(header))."""
    return keccak256(encode_header(header))


__all__ = [
    "HeaderHasher",
    "decode_header",
    "encode_header",
    "keccak256",
    "keccak_header_hash",
]
