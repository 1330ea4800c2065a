"""Pydantic models for JSON-RPC requests and responses."""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request model."""

    jsonrpc: str = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(..., description="Request ID")


class EthGetBlockByNumberRequest(JsonRpcRequest):
    """JSON-RPC request for eth_getBlockByNumber."""

    method: str = Field(default="eth_getBlockByNumber", frozen=True)


class RpcBlockHeader(BaseModel):
    """Header fields of an eth_getBlockByNumber result, as hex strings."""

    hash: str | None = Field(default=None, description="Block hash reported by the node")
    parent_hash: str = Field(..., alias="parentHash")
    sha3_uncles: str = Field(..., alias="sha3Uncles")
    miner: str = Field(..., description="Beneficiary address")
    state_root: str = Field(..., alias="stateRoot")
    transactions_root: str = Field(..., alias="transactionsRoot")
    receipts_root: str = Field(..., alias="receiptsRoot")
    logs_bloom: str = Field(..., alias="logsBloom")
    difficulty: str
    number: str
    gas_limit: str = Field(..., alias="gasLimit")
    gas_used: str = Field(..., alias="gasUsed")
    timestamp: str
    extra_data: str = Field(..., alias="extraData")
    mix_hash: str | None = Field(default=None, alias="mixHash")
    nonce: str | None = None
    base_fee_per_gas: str | None = Field(default=None, alias="baseFeePerGas")
    withdrawals_root: str | None = Field(default=None, alias="withdrawalsRoot")
    blob_gas_used: str | None = Field(default=None, alias="blobGasUsed")
    excess_blob_gas: str | None = Field(default=None, alias="excessBlobGas")
    parent_beacon_block_root: str | None = Field(
        default=None, alias="parentBeaconBlockRoot"
    )
    requests_hash: str | None = Field(
        default=None,
        alias="requestsHash",
        validation_alias=AliasChoices("requestsHash", "requestsRoot"),
    )

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


__all__ = [
    "EthGetBlockByNumberRequest",
    "JsonRpcRequest",
    "RpcBlockHeader",
]
