# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for nano-sync.

Two console scripts are provided:

    nsync: Record the current content of a filter as its next version
    nsync-rebuild: Reconstruct a version from a published output directory

Example:
    Record a new version with the default locations:
        ```bash
        $ nsync filters/ads.txt
        ```

    Custom output and config directories:
        ```bash
        $ nsync filters/ads.txt -o public/ads -c .nsync
        ```

    Verify what consumers will see:
        ```bash
        $ nsync-rebuild public/ads > /tmp/ads.txt
        $ nsync-rebuild public/ads --version 12 --out ads-v12.txt
        ```

Exit Codes:

- 0: Success
- 1: Error (bad arguments, bad configuration, I/O failure)

Note:
    The CLI uses argparse for command parsing (stdlib, zero dependencies).
    Diagnostics go to stderr. Verbose mode shows full tracebacks on
    errors for debugging. Debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys
import traceback

from nanosync.core import DEFAULT_CONFIG_DIR, reconcile
from nanosync.exceptions import NanoSyncError
from nanosync.logging import get_logger, set_global_logger
from nanosync.rebuild import rebuild


def _package_version() -> str:
    try:
        return version("nano-sync")
    except PackageNotFoundError:
        from nanosync import __version__

        return __version__


def _report_error(err: Exception, args: argparse.Namespace) -> int:
    print(f"Error: {err}", file=sys.stderr)
    if args.verbose or args.debug:
        traceback.print_exc()
    return 1


def cmd_reconcile(args: argparse.Namespace) -> int:
    """Handler for 'nsync'.

    Reads the filter, decides between checkpoint and patch, writes the
    output directory and updates the global config.

    Args:
        args: Parsed command-line arguments containing the filter path,
            output and config directories, option overrides and flags.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    overrides = {
        "skip_if_unchanged": True if args.skip_unchanged else None,
        "max_patch_ratio": args.max_patch_ratio,
        "clean_stale_patches": False if args.keep_stale_patches else None,
    }

    try:
        result = reconcile(
            args.filter,
            output_dir=args.output,
            config_dir=args.config,
            overrides=overrides,
        )
    except NanoSyncError as err:
        return _report_error(err, args)
    except OSError as err:
        return _report_error(err, args)

    print("=" * 70)
    print("RECONCILE RESULTS")
    print("=" * 70)
    print(f"Filter:          {result.filter_path}")
    print(f"Output:          {result.output_dir}")
    print(f"Action:          {result.action}")
    print(f"Version:         {result.version}")
    print(f"Checkpoint:      {result.checkpoint}")
    print(f"Latest:          {result.latest}")
    if result.patch_file:
        print(f"Patch File:      {result.patch_file}")
    if result.reason:
        print(f"Reason:          {result.reason}")
    print(f"SHA-256:         {result.sha256}")
    print("=" * 70)
    if result.recovered:
        print()
        print("[WARNING] History was broken and has been reset to a checkpoint.")

    return 0


def cmd_rebuild(args: argparse.Namespace) -> int:
    """Handler for 'nsync-rebuild'.

    Applies checkpoint.txt and the patches up to the requested version and
    writes the content to --out, or to stdout when no file is given.

    Args:
        args: Parsed command-line arguments containing the output
            directory, version, destination file and flags.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    try:
        result = rebuild(args.output_dir, version=args.version)
        if args.out:
            with open(args.out, "w", encoding="utf-8", newline="") as f:
                f.write(result.content)
    except NanoSyncError as err:
        return _report_error(err, args)
    except OSError as err:
        return _report_error(err, args)

    if args.out:
        print(
            f"[SUCCESS] Version {result.version} written to {args.out} "
            f"({result.patches_applied} patch(es) applied)"
        )
    else:
        sys.stdout.write(result.content)
    return 0


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on usage errors."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_verbosity_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser of 'nsync'."""
    parser = _ArgumentParser(
        prog="nsync",
        description=(
            "Record the current content of a filter list as a checkpoint or "
            "an incremental patch for differential updates."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"nsync {_package_version()}",
    )
    parser.add_argument(
        "filter",
        help="Path to the filter file",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output directory (default: <filter name>-diff next to the filter)",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=str(DEFAULT_CONFIG_DIR),
        help=f"Config and cache directory (default: {DEFAULT_CONFIG_DIR})",
    )
    parser.add_argument(
        "--skip-unchanged",
        action="store_true",
        help="Don't record a version when the content is unchanged",
    )
    parser.add_argument(
        "--max-patch-ratio",
        type=_positive_float,
        default=None,
        help="Write a checkpoint instead of a patch larger than RATIO x filter size",
    )
    parser.add_argument(
        "--keep-stale-patches",
        action="store_true",
        help="Keep patch files of previous checkpoints",
    )
    _add_verbosity_flags(parser)
    parser.set_defaults(func=cmd_reconcile)
    return parser


def build_rebuild_parser() -> argparse.ArgumentParser:
    """Build the argument parser of 'nsync-rebuild'."""
    parser = _ArgumentParser(
        prog="nsync-rebuild",
        description="Reconstruct a filter version from an nsync output directory.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "output_dir",
        type=Path,
        help="Output directory written by nsync",
    )
    parser.add_argument(
        "--version",
        type=int,
        default=None,
        help="Version to reconstruct (default: latest)",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="File to write the content to (default: stdout)",
    )
    _add_verbosity_flags(parser)
    parser.set_defaults(func=cmd_rebuild)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the nsync CLI.

    This function is registered as the 'nsync' console script in pyproject.toml.
    """
    args = build_parser().parse_args(argv)
    sys.exit(args.func(args))


def rebuild_main(argv: list[str] | None = None) -> None:
    """Entry point registered as the 'nsync-rebuild' console script."""
    args = build_rebuild_parser().parse_args(argv)
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
