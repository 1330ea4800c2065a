"""Error types raised while fetching, verifying and proving a header chain."""


class HeaderChainError(Exception):
    """Base class for all fatal header chain errors."""


class MissingBlockError(HeaderChainError):
    """The data source returned no block for a requested number."""

    def __init__(self, block_number: int) -> None:
        self.block_number = block_number
        super().__init__(f"missing block {block_number} in range")


class IncompleteHeaderError(HeaderChainError):
    """The data source returned a block without a field the header hash needs."""

    def __init__(self, block_number: int, field: str) -> None:
        self.block_number = block_number
        self.field = field
        super().__init__(f"block {block_number} is missing header field {field}")


class HashLinkMismatchError(HeaderChainError):
    """A header's parent hash is not the hash of the header before it."""

    def __init__(self, index: int, expected: bytes, actual: bytes) -> None:
        self.index = index
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"header {index} parent hash 0x{actual.hex()} does not match "
            f"previous header hash 0x{expected.hex()}"
        )


class EmptySequenceError(HeaderChainError):
    """A header sequence with no headers was given."""

    def __init__(self) -> None:
        super().__init__("header sequence is empty")


class PayloadDecodeError(HeaderChainError):
    """The guest payload is truncated or malformed."""


class GuestExecutionError(HeaderChainError):
    """The guest program aborted; `__cause__` holds the guest's own error."""


class ProofGenerationError(HeaderChainError):
    """The prover failed to produce a proof."""


class ProofVerificationError(HeaderChainError):
    """A proof did not verify against the verifying key."""


__all__ = [
    "EmptySequenceError",
    "GuestExecutionError",
    "HashLinkMismatchError",
    "HeaderChainError",
    "IncompleteHeaderError",
    "MissingBlockError",
    "PayloadDecodeError",
    "ProofGenerationError",
    "ProofVerificationError",
]
