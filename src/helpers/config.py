"""Configuration management and environment variable utilities."""

import os

from dotenv import load_dotenv

from src.helpers.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_GUEST_PROGRAM,
    DEFAULT_PROVER,
    DEFAULT_RPC_URL,
)


# Load environment variables from .env file
load_dotenv()


def get_eth_rpc_url(rpc_url: str | None = None) -> str:
    """Get Ethereum RPC URL from parameter, environment, or the local default.

    Args:
        rpc_url: Optional RPC URL to use directly

    Returns:
        Ethereum RPC URL

    Example:
        ```python
        from src.helpers.config import get_eth_rpc_url

        # Get from environment, falling back to http://localhost:8545
        rpc_url = get_eth_rpc_url()

        # Or provide explicitly
        rpc_url = get_eth_rpc_url("https://eth.llamarpc.com")
        ```
    """
    if rpc_url:
        return rpc_url

    return os.getenv("ETH_RPC_URL") or DEFAULT_RPC_URL


def get_chunk_size(chunk_size: int | None = None) -> int:
    """Get the number of headers fetched concurrently per chunk.

    Args:
        chunk_size: Optional chunk size to use directly

    Returns:
        Positive chunk size

    Raises:
        ValueError: If the value is not a positive integer
    """
    if chunk_size is None:
        raw = os.getenv("HEADER_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE))
        try:
            chunk_size = int(raw)
        except ValueError:
            msg = f"HEADER_CHUNK_SIZE must be an integer, got {raw!r}"
            raise ValueError(msg) from None

    if chunk_size < 1:
        msg = f"Chunk size must be positive, got {chunk_size}"
        raise ValueError(msg)

    return chunk_size


def get_guest_program(guest_program: str | None = None) -> str:
    """Get the import path of the guest entry point.

    Args:
        guest_program: Optional import path ("module:function")

    Returns:
        Guest program import path

    Raises:
        ValueError: If the path is not of the form "module:function"
    """
    path = guest_program or os.getenv("GUEST_PROGRAM") or DEFAULT_GUEST_PROGRAM
    module, sep, func = path.partition(":")
    if not sep or not module or not func:
        msg = f"Guest program must look like 'module:function', got {path!r}"
        raise ValueError(msg)
    return path


def get_prover_name(prover: str | None = None) -> str:
    """Get the configured prover backend name.

    Args:
        prover: Optional backend name to use directly

    Returns:
        Prover backend name, lowercased
    """
    return (prover or os.getenv("PROVER") or DEFAULT_PROVER).lower()


__all__ = [
    "get_chunk_size",
    "get_eth_rpc_url",
    "get_guest_program",
    "get_prover_name",
]
