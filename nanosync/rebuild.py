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

"""Consumer-side reconstruction of filter versions.

Does what a downstream consumer of an output directory does: start from
checkpoint.txt and apply 1.patch, 2.patch, ... in order. Useful to verify
a published directory and to materialize a specific version.

Unlike the producer side, nothing here is self-healing: a missing or
inconsistent artifact is an error.

Example:
    Reconstruct the latest version:
        ```python
        from pathlib import Path
        from nanosync.rebuild import rebuild

        result = rebuild(Path("filters/ads-diff"))
        Path("ads.txt").write_text(result.content, encoding="utf-8")
        ```
"""

from __future__ import annotations

from pathlib import Path

from nanosync.artifacts import OutputWriter
from nanosync.exceptions import HistoryError
from nanosync.history import VersionMeta, replay
from nanosync.io import sha256_text
from nanosync.logging import get_global_logger
from nanosync.results import RebuildResult


def rebuild(output_dir: str | Path, version: int | None = None) -> RebuildResult:
    """Reconstruct a version from an output directory.

    Args:
        output_dir: Output directory written by reconcile().
        version: Version to reconstruct, between meta.json checkpoint and
            latest inclusive. Default is latest.

    Returns:
        RebuildResult with the reconstructed content.

    Raises:
        HistoryError: If meta.json is missing or invalid, the version is
            out of range, or checkpoint.txt or a needed patch is missing.
        PatchError: If a patch does not apply.

    """
    logger = get_global_logger()
    writer = OutputWriter(Path(output_dir))

    try:
        meta = VersionMeta.from_dict(writer.read_meta())
    except FileNotFoundError as err:
        raise HistoryError(f"No meta.json in {writer.output_dir}") from err
    except (ValueError, OSError) as err:
        # json.JSONDecodeError is a ValueError
        raise HistoryError(f"Invalid meta.json in {writer.output_dir}: {err}") from err

    if version is None:
        version = meta.latest
    if not meta.checkpoint <= version <= meta.latest:
        raise HistoryError(
            f"Version {version} is not available, {writer.output_dir} holds "
            f"versions {meta.checkpoint} to {meta.latest}"
        )

    count = version - meta.checkpoint
    try:
        content = replay(writer, count)
    except FileNotFoundError as err:
        raise HistoryError(f"Missing {err.filename}") from err

    logger.verbose("REBUILD", f"Rebuilt version {version} with {count} patch(es)")
    return RebuildResult(
        output_dir=writer.output_dir,
        version=version,
        checkpoint=meta.checkpoint,
        patches_applied=count,
        content=content,
        sha256=sha256_text(content),
    )
