"""Pytest configuration and shared header chain fixtures."""

from __future__ import annotations

import json

import pytest

from typing import TYPE_CHECKING, Any

import httpx

from src.chain.hashing import keccak_header_hash
from src.chain.models import BlockHeader
from src.helpers.parsers import to_hex


if TYPE_CHECKING:
    from collections.abc import Callable

    from pytest_httpx import HTTPXMock


RPC_URL = "https://test.rpc"

EMPTY_OMMERS_HASH = bytes.fromhex(
    "1dcc4de8dec75d7aab85b567b6ccd41ad312451b948a7413f0a142fd40d49347"
)


@pytest.fixture
def rpc_url() -> str:
    """JSON-RPC endpoint served by httpx_mock in tests."""
    return RPC_URL


@pytest.fixture
def make_header() -> Callable[..., BlockHeader]:
    """Factory for post-London headers with deterministic field values.

    Returns:
        Callable taking (number, parent_hash, **overrides)
    """

    def _make(
        number: int = 0, parent_hash: bytes = bytes(32), **overrides: Any
    ) -> BlockHeader:
        fields: dict[str, Any] = {
            "parent_hash": parent_hash,
            "ommers_hash": EMPTY_OMMERS_HASH,
            "beneficiary": bytes.fromhex("95222290dd7278aa3ddd389cc1e1d165cc4bafe5"),
            "state_root": (number % 256).to_bytes(1, "big") * 32,
            "transactions_root": b"\x56" * 32,
            "receipts_root": b"\x57" * 32,
            "logs_bloom": bytes(256),
            "difficulty": 0,
            "number": number,
            "gas_limit": 30_000_000,
            "gas_used": 12_345_678,
            "timestamp": 1_700_000_000 + 12 * number,
            "extra_data": b"beaverbuild.org",
            "mix_hash": b"\x42" * 32,
            "nonce": bytes(8),
            "base_fee_per_gas": 7_000_000_000,
        }
        fields.update(overrides)
        return BlockHeader(**fields)

    return _make


@pytest.fixture
def make_chain(
    make_header: Callable[..., BlockHeader],
) -> Callable[..., list[BlockHeader]]:
    """Factory for hash-linked header chains.

    Returns:
        Callable taking (length, start=100, parent_hash=0x11..11)
    """

    def _make(
        length: int, start: int = 100, parent_hash: bytes = b"\x11" * 32
    ) -> list[BlockHeader]:
        headers = []
        parent = parent_hash
        for number in range(start, start + length):
            header = make_header(number, parent)
            headers.append(header)
            parent = keccak_header_hash(header)
        return headers

    return _make


def header_to_rpc_json(header: BlockHeader) -> dict[str, Any]:
    """Render a header the way eth_getBlockByNumber returns it."""
    block: dict[str, Any] = {
        "hash": to_hex(keccak_header_hash(header)),
        "parentHash": to_hex(header.parent_hash),
        "sha3Uncles": to_hex(header.ommers_hash),
        "miner": to_hex(header.beneficiary),
        "stateRoot": to_hex(header.state_root),
        "transactionsRoot": to_hex(header.transactions_root),
        "receiptsRoot": to_hex(header.receipts_root),
        "logsBloom": to_hex(header.logs_bloom),
        "difficulty": hex(header.difficulty),
        "number": hex(header.number),
        "gasLimit": hex(header.gas_limit),
        "gasUsed": hex(header.gas_used),
        "timestamp": hex(header.timestamp),
        "extraData": to_hex(header.extra_data),
        "mixHash": to_hex(header.mix_hash),
        "nonce": to_hex(header.nonce),
        "size": "0x220",
        "transactions": [],
        "uncles": [],
    }
    if header.base_fee_per_gas is not None:
        block["baseFeePerGas"] = hex(header.base_fee_per_gas)
    if header.withdrawals_root is not None:
        block["withdrawalsRoot"] = to_hex(header.withdrawals_root)
    if header.blob_gas_used is not None:
        block["blobGasUsed"] = hex(header.blob_gas_used)
    if header.excess_blob_gas is not None:
        block["excessBlobGas"] = hex(header.excess_blob_gas)
    if header.parent_beacon_block_root is not None:
        block["parentBeaconBlockRoot"] = to_hex(header.parent_beacon_block_root)
    if header.requests_hash is not None:
        block["requestsHash"] = to_hex(header.requests_hash)
    return block


@pytest.fixture
def rpc_block() -> Callable[[BlockHeader], dict[str, Any]]:
    """Convert a BlockHeader into an eth_getBlockByNumber result."""
    return header_to_rpc_json


@pytest.fixture
def serve_headers(
    httpx_mock: HTTPXMock, rpc_url: str
) -> Callable[[list[BlockHeader]], list[int]]:
    """Serve eth_getBlockByNumber for the given headers from httpx_mock.

    Unknown block numbers get a null result. Returns the list that records
    requested block numbers in arrival order.
    """

    def _serve(headers: list[BlockHeader]) -> list[int]:
        blocks = {header.number: header_to_rpc_json(header) for header in headers}
        requested: list[int] = []

        def callback(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            number = int(body["params"][0], 16)
            requested.append(number)
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "result": blocks.get(number)},
            )

        httpx_mock.add_callback(callback, url=rpc_url, is_reusable=True)
        return requested

    return _serve
