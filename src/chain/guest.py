"""Header chain verification, run as a guest program.

The guest reads a header count and then the headers one at a time, checks
that each header's parent hash is the hash of the header before it, and
commits 64 bytes: the first header's parent hash followed by the last
header's hash. Any broken link raises and nothing is committed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.chain.errors import EmptySequenceError, HashLinkMismatchError
from src.chain.models import Commitment


if TYPE_CHECKING:
    from collections.abc import Iterable

    from src.chain.hashing import HeaderHasher
    from src.chain.models import BlockHeader
    from src.chain.zkvm import GuestEnv


def verify_header_chain(
    headers: Iterable[BlockHeader], hash_header: HeaderHasher
) -> Commitment:
    """Check hash linkage across `headers` and return the commitment.

    Headers are consumed lazily, in order.

    Raises:
        EmptySequenceError: If `headers` yields nothing
        HashLinkMismatchError: At the first header not linked to its predecessor
    """
    iterator = iter(headers)
    first = next(iterator, None)
    if first is None:
        raise EmptySequenceError

    start_hash = first.parent_hash
    running_hash = hash_header(first)
    for index, header in enumerate(iterator, start=1):
        if header.parent_hash != running_hash:
            raise HashLinkMismatchError(index, running_hash, header.parent_hash)
        running_hash = hash_header(header)

    return Commitment(start_hash=start_hash, end_hash=running_hash)


def main(env: GuestEnv) -> None:
    """Guest entry point."""
    count = env.input.read_u32()
    headers = (env.input.read_header() for _ in range(count))
    commitment = verify_header_chain(headers, env.hash_header)
    env.output.commit(commitment.to_bytes())


__all__ = ["main", "verify_header_chain"]
