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

"""Exception hierarchy for nano-sync.

This module defines the exceptions that can escape the public API:

- ConfigError: Bad caller input (config.json entries of the wrong type,
    invalid settings.yaml, missing filter file)
- PatchError: A patch does not apply cleanly to the text it targets
- HistoryError: An output directory cannot be rebuilt (missing or
    inconsistent artifacts)

All exceptions inherit from NanoSyncError, allowing users to catch all
nano-sync errors with a single except clause if needed.

Broken history inside reconcile() is NOT an exception: it is repaired by
writing a fresh checkpoint and reported on the result instead.

Example:
    Catching specific error types:
        ```python
        from nanosync import reconcile
        from nanosync.exceptions import ConfigError

        try:
            reconcile(Path("filters/ads.txt"))
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "NanoSyncError",
    "ConfigError",
    "FilterNotFoundError",
    "PatchError",
    "HistoryError",
]


class NanoSyncError(Exception):
    """Base exception for all nano-sync errors."""

    pass


class ConfigError(NanoSyncError):
    """Raised for configuration and usage errors.

    This exception is raised when there are problems with:

    - config.json entries with wrong field types
    - settings.yaml syntax or option types
    - Invalid arguments passed to the public API
    """

    pass


class FilterNotFoundError(ConfigError):
    """Raised when the filter file to track does not exist."""

    pass


class PatchError(NanoSyncError):
    """Raised when a unified diff cannot be applied to a text.

    Example:
        Detecting a patch that doesn't match its base:
            ```python
            from nanosync.diffing import apply_patch
            from nanosync.exceptions import PatchError

            try:
                apply_patch("unrelated\\n", patch_text)
            except PatchError as e:
                print(f"Patch rejected: {e}")
            ```
    """

    pass


class HistoryError(NanoSyncError):
    """Raised when an output directory cannot be rebuilt.

    Only the consumer side (nanosync.rebuild) raises this; the producer
    side recovers from broken history on its own.
    """

    pass
