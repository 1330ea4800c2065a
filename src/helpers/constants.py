"""Common configuration constants used across the application."""

# RPC Constants
DEFAULT_RPC_URL = "http://localhost:8545"
"""JSON-RPC endpoint used when neither --rpc-url nor ETH_RPC_URL is given"""

DEFAULT_CHUNK_SIZE = 50
"""Default number of headers fetched concurrently per chunk"""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default HTTP request timeout in seconds"""

# Retry Configuration
MAX_RETRIES = 5
"""Default maximum number of retry attempts"""

RETRY_BASE_DELAY = 1.0
"""Base delay for exponential backoff in seconds"""

RETRY_MAX_DELAY = 60.0
"""Maximum delay between retries in seconds"""

# Guest Program
DEFAULT_GUEST_PROGRAM = "src.chain.guest:main"
"""Import path of the guest entry point (module:function)"""

DEFAULT_PROVER = "mock"
"""Name of the prover backend used when PROVER is not set"""

# Logging
DEFAULT_LOG_LEVEL = "INFO"
"""Log level used when LOG_LEVEL is not set"""
