"""Attest that a range of Ethereum block headers forms a hash-linked chain."""

import argparse
import asyncio
import sys

import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from src.chain.driver import ExecutionResult, ProofDriver, ProveResult, attest_range
from src.chain.errors import (
    HeaderChainError,
    ProofGenerationError,
    ProofVerificationError,
)
from src.chain.models import Mode, ProofRequest
from src.chain.prover import get_prover
from src.chain.zkvm import load_guest_program
from src.helpers.config import (
    get_chunk_size,
    get_eth_rpc_url,
    get_guest_program,
    get_prover_name,
)
from src.helpers.logging import set_log_level
from src.helpers.progress import track_progress
from src.helpers.rpc import RPCClient


def print_result(console: Console, result: ExecutionResult | ProveResult) -> None:
    """Print the commitment and the mode-specific report."""
    if isinstance(result, ExecutionResult):
        console.print("[green]Program executed successfully.[/green]")
    console.print(f"start_hash: {result.commitment.start_hex}")
    console.print(f"end_hash: {result.commitment.end_hex}")

    if isinstance(result, ExecutionResult):
        console.print(f"Number of cycles: {result.report.total_cycles:,}")
        if result.cycles_per_block is not None:
            console.print(f"Cycles per block: {result.cycles_per_block:,.1f}")
    else:
        console.print("[green]Successfully generated proof![/green]")
        console.print("[green]Successfully verified proof![/green]")


async def main(
    mode: Mode,
    start: int,
    end: int,
    *,
    rpc_url: str | None = None,
    chunk_size: int | None = None,
    guest: str | None = None,
    prover: str | None = None,
) -> int:
    """Fetch, execute or prove, and report.

    Returns:
        Process exit code
    """
    console = Console()

    try:
        request = ProofRequest(
            start=start, end=end, chunk_size=get_chunk_size(chunk_size), mode=mode
        )
        program = load_guest_program(get_guest_program(guest))
        driver = ProofDriver(get_prover(get_prover_name(prover)), program)
        rpc = RPCClient(get_eth_rpc_url(rpc_url))
    except (ValidationError, ValueError) as e:
        console.print(f"[red]Invalid request: {escape(str(e))}[/red]")
        return 1

    console.print(f"[cyan]Fetching blocks {start:,}-{end:,} from {rpc.rpc_url}[/cyan]")

    try:
        with track_progress(
            "Fetching headers", total=request.block_count, console=console
        ) as advance:
            result = await attest_range(request, rpc, driver, on_chunk=advance)
    except ProofGenerationError as e:
        console.print(f"[red]Failed to generate proof: {escape(str(e))}[/red]")
        return 1
    except ProofVerificationError as e:
        console.print(f"[red]Failed to verify proof: {escape(str(e))}[/red]")
        return 1
    except HeaderChainError as e:
        console.print(f"[red]{type(e).__name__}: {escape(str(e))}[/red]")
        return 1
    except (httpx.HTTPError, ValueError) as e:
        console.print(f"[red]RPC request failed: {escape(str(e))}[/red]")
        return 1

    print_result(console, result)
    return 0


def cli() -> None:
    """Command-line interface entry point."""
    parser = argparse.ArgumentParser(
        description="Prove that block headers [start, end) form a hash-linked chain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Execute only: print the commitment and cycle count
  python -m src.prove_headers --execute --start 20000000 --end 20000100

  # Generate and verify a proof
  python -m src.prove_headers --prove --start 20000000 --end 20000100
        """,
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--execute",
        action="store_const",
        const=Mode.EXECUTE,
        dest="mode",
        help="Run the guest without generating a proof",
    )
    mode.add_argument(
        "--prove",
        action="store_const",
        const=Mode.PROVE,
        dest="mode",
        help="Generate a proof and verify it",
    )
    parser.add_argument("--start", type=int, required=True, help="First block (inclusive)")
    parser.add_argument("--end", type=int, required=True, help="Last block (exclusive)")
    parser.add_argument(
        "--rpc-url", default=None, help="JSON-RPC endpoint (default: ETH_RPC_URL)"
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=None,
        help="Headers fetched concurrently per chunk (default: HEADER_CHUNK_SIZE or 50)",
    )
    parser.add_argument(
        "--guest", default=None, help="Guest entry point as module:function"
    )
    parser.add_argument("--prover", default=None, help="Prover backend (default: mock)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL",
    )

    args = parser.parse_args()

    if args.log_level:
        set_log_level(args.log_level)

    exit_code = asyncio.run(
        main(
            args.mode,
            args.start,
            args.end,
            rpc_url=args.rpc_url,
            chunk_size=args.chunk_size,
            guest=args.guest,
            prover=args.prover,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    cli()
