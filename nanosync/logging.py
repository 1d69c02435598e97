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

"""Logging interface for nano-sync.

Library modules log through a small protocol instead of printing
directly, so the engine runs silently when embedded and reports what it
wrote when driven from the CLI.

Three levels:
- Step: always printed, "[2/4] Loading configuration..."
- Verbose: decisions and files written, "[ENGINE] Patch 3 -> version 7"
- Debug: internals such as renames and replayed patches (implies verbose)

Every verbose/debug message carries one of the PREFIXES below, naming the
part of nano-sync it comes from. Loggers reject unknown prefixes with
ValueError, silent ones included, so a typo fails in tests instead of
producing an unsearchable log line.

Output goes to stderr: nsync-rebuild writes filter content to stdout and
must stay pipeable.

Example:
    CLI setup:
        ```python
        from nanosync.logging import get_logger, set_global_logger

        set_global_logger(get_logger(verbose=True))
        ```

    Library code:
        ```python
        from nanosync.logging import get_global_logger

        logger = get_global_logger()
        logger.step(3, 4, "Reconciling versions...")
        logger.verbose("OUTPUT", "Wrote public/ads/4.patch")
        ```
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

PREFIXES = {
    "STATE": "global config.json",
    "CONFIG": "settings.yaml and option overrides",
    "HISTORY": "meta.json validation and chain replay",
    "ENGINE": "checkpoint/patch decisions",
    "OUTPUT": "artifacts in the output directory",
    "CACHE": "snapshot cache",
    "FILE": "atomic file writes",
    "REBUILD": "consumer-side reconstruction",
}


def check_prefix(prefix: str) -> str:
    """Return prefix unchanged if it is one of PREFIXES.

    Raises:
        ValueError: For any other prefix.

    """
    if prefix not in PREFIXES:
        raise ValueError(
            f"Unknown log prefix {prefix!r}, expected one of {', '.join(PREFIXES)}"
        )
    return prefix


class Logger(Protocol):
    """Protocol for logger implementations."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report progress through a numbered sequence of steps."""
        ...

    def verbose(self, prefix: str, message: str) -> None:
        """Report a decision or a written file."""
        ...

    def debug(self, prefix: str, message: str) -> None:
        """Report internal detail."""
        ...


class DefaultLogger:
    """Logger printing to a text stream, stderr unless given.

    Args:
        verbose: Print verbose messages.
        debug: Print debug messages too (implies verbose).
        stream: Destination. Resolved on each write when None, so that
            a replaced sys.stderr is honored.

    """

    def __init__(
        self,
        verbose: bool = False,
        debug: bool = False,
        stream: TextIO | None = None,
    ) -> None:
        self._verbose = verbose or debug
        self._debug = debug
        self._stream = stream

    def _emit(self, line: str) -> None:
        print(line, file=self._stream if self._stream is not None else sys.stderr)

    def step(self, step: int, total: int, message: str) -> None:
        self._emit(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        check_prefix(prefix)
        if self._verbose:
            self._emit(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        check_prefix(prefix)
        if self._debug:
            self._emit(f"[{prefix}] {message}")


class SilentLogger:
    """Logger that prints nothing but still checks prefixes."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        check_prefix(prefix)

    def debug(self, prefix: str, message: str) -> None:
        check_prefix(prefix)


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Return a stderr logger with the given verbosity."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the logger library modules write to (silent by default)."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the global logger.

    Note:
        This affects every library function that calls get_global_logger().
        CheckpointEngine also accepts a logger of its own.
    """
    global _global_logger
    _global_logger = logger
