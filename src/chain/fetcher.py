"""Fetch block headers from an Ethereum JSON-RPC node."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from src.chain.errors import IncompleteHeaderError, MissingBlockError
from src.chain.hashing import keccak_header_hash
from src.chain.models import BlockHeader
from src.helpers.logging import get_logger
from src.helpers.parsers import parse_hex_bytes, parse_hex_int, to_hex
from src.helpers.rpc_models import RpcBlockHeader


if TYPE_CHECKING:
    import httpx

    from src.helpers.rpc import RPCClient


logger = get_logger(__name__)


def _optional_int(value: str | None) -> int | None:
    return parse_hex_int(value) if value is not None else None


def _optional_hash(value: str | None) -> bytes | None:
    return parse_hex_bytes(value, 32) if value is not None else None


def rpc_header_to_block_header(raw: RpcBlockHeader) -> BlockHeader:
    """Map an RPC header onto the canonical header fields.

    Args:
        raw: Validated eth_getBlockByNumber result

    Returns:
        BlockHeader whose hash preimage matches the node's header

    Raises:
        IncompleteHeaderError: If the node omitted mixHash or nonce
    """
    number = parse_hex_int(raw.number)
    if raw.mix_hash is None:
        raise IncompleteHeaderError(number, "mixHash")
    if raw.nonce is None:
        raise IncompleteHeaderError(number, "nonce")

    return BlockHeader(
        parent_hash=parse_hex_bytes(raw.parent_hash, 32),
        ommers_hash=parse_hex_bytes(raw.sha3_uncles, 32),
        beneficiary=parse_hex_bytes(raw.miner, 20),
        state_root=parse_hex_bytes(raw.state_root, 32),
        transactions_root=parse_hex_bytes(raw.transactions_root, 32),
        receipts_root=parse_hex_bytes(raw.receipts_root, 32),
        logs_bloom=parse_hex_bytes(raw.logs_bloom, 256),
        difficulty=parse_hex_int(raw.difficulty),
        number=number,
        gas_limit=parse_hex_int(raw.gas_limit),
        gas_used=parse_hex_int(raw.gas_used),
        timestamp=parse_hex_int(raw.timestamp),
        extra_data=parse_hex_bytes(raw.extra_data),
        mix_hash=parse_hex_bytes(raw.mix_hash, 32),
        nonce=parse_hex_bytes(raw.nonce, 8),
        base_fee_per_gas=_optional_int(raw.base_fee_per_gas),
        withdrawals_root=_optional_hash(raw.withdrawals_root),
        blob_gas_used=_optional_int(raw.blob_gas_used),
        excess_blob_gas=_optional_int(raw.excess_blob_gas),
        parent_beacon_block_root=_optional_hash(raw.parent_beacon_block_root),
        requests_hash=_optional_hash(raw.requests_hash),
    )


class HeaderFetcher:
    """Resolve block numbers to canonical headers over JSON-RPC."""

    def __init__(self, rpc: RPCClient, client: httpx.AsyncClient) -> None:
        """Initialize fetcher.

        Args:
            rpc: JSON-RPC client for the node
            client: Shared HTTP client, owned by the caller
        """
        self.rpc = rpc
        self.client = client

    async def fetch(self, block_number: int) -> BlockHeader:
        """Fetch one header.

        Raises:
            MissingBlockError: If the node returned no block for the number
        """
        block: dict[str, Any] | None = await self.rpc.get_block_by_number(
            self.client, block_number
        )
        if block is None:
            raise MissingBlockError(block_number)

        raw = RpcBlockHeader.model_validate(block)
        header = rpc_header_to_block_header(raw)

        if raw.hash is not None:
            computed = keccak_header_hash(header)
            if to_hex(computed) != raw.hash.lower():
                logger.warning(
                    "Block %d: computed hash %s differs from node hash %s",
                    block_number,
                    to_hex(computed),
                    raw.hash,
                )

        return header


__all__ = ["HeaderFetcher", "rpc_header_to_block_header"]
