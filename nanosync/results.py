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

"""Public API return types for nano-sync.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from nanosync import reconcile

        result = reconcile(Path("filters/ads.txt"))
        print(result.action, result.version)  # e.g. "patch" 4
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like VersionMeta and HistoryReset) remain co-located with their
    related logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

ACTION_CHECKPOINT = "checkpoint"
ACTION_PATCH = "patch"
ACTION_UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ReconcileResult:
    """Result from recording a new version of a filter.

    Attributes:
        filter_path: Config key of the filter.
        output_dir: Output directory that was updated.
        action: "checkpoint", "patch" or "unchanged" (nothing written,
            only with skip_if_unchanged).
        version: Version number of the content just recorded.
        checkpoint: meta.json checkpoint after the operation.
        latest: meta.json latest after the operation.
        patch_file: Path of the patch written, None unless action is "patch".
        reason: Why a checkpoint was taken ("first build", rollover,
            oversized patch, or the broken-history reason). None for patches.
        recovered: True if the checkpoint repaired a broken history.
        sha256: SHA-256 of the recorded content.
    """

    filter_path: str
    output_dir: Path
    action: str
    version: int
    checkpoint: int
    latest: int
    patch_file: Path | None
    reason: str | None
    recovered: bool
    sha256: str


@dataclass(frozen=True)
class RebuildResult:
    """Result from reconstructing a version from an output directory.

    Attributes:
        output_dir: Output directory that was read.
        version: Version that was reconstructed.
        checkpoint: Version of the checkpoint it was built from.
        patches_applied: Number of patches applied on top of the checkpoint.
        content: The reconstructed text.
        sha256: SHA-256 of content.
    """

    output_dir: Path
    version: int
    checkpoint: int
    patches_applied: int
    content: str
    sha256: str
