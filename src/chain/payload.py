"""Guest input payload: a u32 count followed by length-prefixed header RLP.

Layout (all integers little-endian)::

    [u32 count][u32 len_0][rlp header_0][u32 len_1][rlp header_1]...
"""

import struct
from collections.abc import Sequence

from src.chain.errors import EmptySequenceError, PayloadDecodeError
from src.chain.hashing import decode_header, encode_header
from src.chain.models import BlockHeader

U32 = struct.Struct("<I")


def encode_payload(headers: Sequence[BlockHeader]) -> bytes:
    """Build the guest payload from an ordered header sequence.

    Headers are written in the order given, without reordering or
    deduplication.

    Raises:
        EmptySequenceError: If `headers` is empty
    """
    if not headers:
        raise EmptySequenceError

    parts = [U32.pack(len(headers))]
    for header in headers:
        encoded = encode_header(header)
        parts.append(U32.pack(len(encoded)))
        parts.append(encoded)
    return b"".join(parts)


class PayloadReader:
    """Sequential reader over a guest payload."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._offset = 0

    @property
    def bytes_read(self) -> int:
        return self._offset

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def read_bytes(self, size: int) -> bytes:
        if size > self.remaining:
            msg = f"payload truncated: wanted {size} bytes at offset {self._offset}, {self.remaining} left"
            raise PayloadDecodeError(msg)
        chunk = bytes(self._data[self._offset : self._offset + size])
        self._offset += size
        return chunk

    def read_u32(self) -> int:
        (value,) = U32.unpack(self.read_bytes(U32.size))
        return value

    def read_header(self) -> BlockHeader:
        return decode_header(self.read_bytes(self.read_u32()))


def decode_payload(data: bytes) -> list[BlockHeader]:
    """Decode a whole payload back into headers.

    Raises:
        PayloadDecodeError: If the payload is truncated or has trailing bytes
    """
    reader = PayloadReader(data)
    headers = [reader.read_header() for _ in range(reader.read_u32())]
    if reader.remaining:
        msg = f"{reader.remaining} trailing bytes after {len(headers)} headers"
        raise PayloadDecodeError(msg)
    return headers


__all__ = ["PayloadReader", "decode_payload", "encode_payload"]
