"""
Command-line interface for saltrace.

Usage:
    python -m saltrace --suffix d3ad
    python -m saltrace --prefix 0000 --workers 8 --max 10000000
    python -m saltrace --contains beef --deployer 0x... --init-code-hash 0x...
    python -m saltrace --regex "^(dead|beef)" --output my_salt
"""

import argparse
import logging
import os
import sys

from saltrace import __version__
from saltrace.core import DEFAULT_DEPLOYER, DEFAULT_INIT_CODE_HASH
from saltrace.export import prepare_export, save_salt_json, save_salt_text
from saltrace.matcher import MatchMode, estimate_difficulty
from saltrace.outcome import SaltraceError
from saltrace.pool import WorkerPool
from saltrace.probe import AddressProbe
from saltrace.service import DEFAULT_UPPER_BOUND, run_search_result
from saltrace.verify import verify_salt


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="saltrace",
        description="Parallel CREATE2 salt miner",
        epilog=(
            "Examples:\n"
            "  saltrace --suffix d3ad\n"
            "  saltrace --prefix 0000 --workers 8 --max 10000000\n"
            "  saltrace --contains beef\n"
            '  saltrace --regex "^(dead|beef)"\n'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version", action="version", version=f"saltrace {__version__}"
    )

    pattern = parser.add_mutually_exclusive_group(required=True)
    pattern.add_argument(
        "--prefix", "-p", metavar="HEX",
        help="Find address starting with this hex string",
    )
    pattern.add_argument(
        "--suffix", "-s", metavar="HEX",
        help="Find address ending with this hex string",
    )
    pattern.add_argument(
        "--contains", "-c", metavar="HEX",
        help="Find address containing this hex string anywhere",
    )
    pattern.add_argument(
        "--regex", "-r", metavar="PATTERN",
        help="Find address matching this regex pattern",
    )

    parser.add_argument(
        "--checksum", action="store_true",
        help="Match case-sensitively against the EIP-55 checksum address",
    )
    parser.add_argument(
        "--deployer", default=DEFAULT_DEPLOYER,
        help=f"CREATE2 factory address (default: {DEFAULT_DEPLOYER})",
    )
    parser.add_argument(
        "--init-code-hash", default=DEFAULT_INIT_CODE_HASH,
        help="keccak256 of the contract init code",
    )
    parser.add_argument(
        "--workers", "-w", type=int, default=0,
        help="Number of worker processes (default: auto)",
    )
    parser.add_argument(
        "--max", "-m", type=int, default=DEFAULT_UPPER_BOUND, dest="upper_bound",
        help=f"Search salts in [0, MAX) (default: {DEFAULT_UPPER_BOUND:,})",
    )
    parser.add_argument(
        "--deadline", type=float, metavar="SECONDS",
        help="Cancel the search after this many seconds",
    )
    parser.add_argument(
        "--output", "-o", metavar="PATH",
        help="Output file path prefix (writes PATH.json and PATH.txt)",
    )
    parser.add_argument(
        "--no-verify", action="store_true",
        help="Skip re-deriving the found address",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Show difficulty estimate without searching",
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true",
        help="Minimal output (just the salt)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log worker activity to stderr",
    )

    return parser


def format_time(seconds: float) -> str:
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        return f"{seconds / 60:.1f}m"
    else:
        return f"{seconds / 3600:.1f}h"


def main(argv: list[str] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.prefix is not None:
        mode, pattern = MatchMode.PREFIX, args.prefix
    elif args.suffix is not None:
        mode, pattern = MatchMode.SUFFIX, args.suffix
    elif args.contains is not None:
        mode, pattern = MatchMode.CONTAINS, args.contains
    else:
        mode, pattern = MatchMode.REGEX, args.regex

    workers = args.workers if args.workers > 0 else max(1, (os.cpu_count() or 2) - 1)

    try:
        probe = AddressProbe.from_hex(
            pattern, mode, deployer=args.deployer, init_code_hash=args.init_code_hash,
            case_sensitive=args.checksum,
        )
        if args.upper_bound < 0:
            raise ValueError(f"--max cannot be negative, got {args.upper_bound}")
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    difficulty = estimate_difficulty(probe.pattern, args.upper_bound)

    if not args.quiet:
        print(f"saltrace v{__version__}")
        print(f"  Pattern:    {mode.value}='{probe.pattern.pattern}'")
        print(f"  Deployer:   {args.deployer}")
        print(f"  Workers:    {workers}")
        print(f"  Keyspace:   [0, {args.upper_bound:,})")
        if difficulty["expected_attempts"]:
            print(f"  Expected:   ~{difficulty['expected_attempts']:,} attempts")
        if difficulty["match_probability"] is not None:
            print(f"  Chance:     {difficulty['match_probability']:.1%} of a match in range")
        print(f"  Difficulty: {difficulty['difficulty_description']}")
        print()

    if args.dry_run:
        return 0

    if not args.quiet:
        print("Searching...")

    try:
        result = run_search_result(
            workers, args.upper_bound, probe, deadline=args.deadline, pool=WorkerPool(),
        )
    except SaltraceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for fault in result.faults:
        print(f"Warning: {fault}", file=sys.stderr)

    if not result.succeeded:
        if result.cancelled:
            print("No result found (search was cancelled).", file=sys.stderr)
        else:
            print(
                f"No result found in [0, {args.upper_bound:,}) "
                f"({result.failure_count} workers exhausted or failed).",
                file=sys.stderr,
            )
        return 1

    export = prepare_export(result.value, probe)

    if not args.quiet:
        print(f"\n{'=' * 60}")
        print(f"  MATCH FOUND")
        print(f"  Salt:       {export.salt}")
        print(f"  Salt hex:   {export.salt_hex}")
        print(f"  Address:    {export.checksum_address}")
        print(f"  Time:       {format_time(result.elapsed)}")
        print(f"  Checked:    {result.checked:,} (finished workers)")
        print(f"{'=' * 60}")

    if args.output:
        json_path = save_salt_json(export, args.output + ".json")
        text_path = save_salt_text(export, args.output + ".txt")
        if not args.quiet:
            print(f"\n  Saved salt: {json_path}")
            print(f"  Saved info: {text_path}")

    if not args.no_verify:
        v = verify_salt(result.value, result.derived, probe)
        if not args.quiet:
            if v["error"]:
                print(f"\n  Verification failed ({v['error']})")
            else:
                addr_ok = "PASS" if v["address_match"] else "FAIL"
                pattern_ok = "PASS" if v["pattern_match"] else "FAIL"
                print(f"\n  Verification:")
                print(f"    Address: {addr_ok}")
                print(f"    Pattern: {pattern_ok}")
        if not (v["address_match"] and v["pattern_match"]):
            return 1

    if args.quiet:
        print(result.value)

    return 0
