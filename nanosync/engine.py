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

"""Checkpoint/patch engine for nano-sync.

For every new content of a filter the engine decides between two moves:

- **Checkpoint**: write the full content to checkpoint.txt and reset
    meta.json to {"checkpoint": v, "latest": v}. Taken on the first build,
    when the chain is too long, and whenever the history can't be trusted.
- **Patch**: diff against the cached previous content, write
    "<latest-checkpoint>.patch" and bump meta.json latest.

Per filter the chain looks like:

    UNINITIALIZED -> CHECKPOINTED(v) -> PATCHED(v+1) -> ... -> PATCHED(v+11)
                  -> CHECKPOINTED(v+12) -> ...

A checkpoint is forced when:

1. The filter was never built (no cached snapshot)
2. The history is broken: meta.json missing or invalid, checkpoint.txt or
    a patch of the current epoch missing, cached snapshot missing or not
    equal to checkpoint.txt with the patches applied
3. meta.json latest disagrees with the version in config.json, which is
    what an interrupted previous run leaves behind
4. More than ROLLOVER_THRESHOLD patches were issued since the checkpoint
5. The patch would be larger than max_patch_ratio * len(content)

Broken history never raises; it is repaired with a checkpoint and
reported through ReconcileResult.recovered and ReconcileResult.reason.

Example:
    Driving the engine directly:
        ```python
        from pathlib import Path
        from nanosync.artifacts import OutputWriter
        from nanosync.cache import SnapshotCache
        from nanosync.engine import CheckpointEngine
        from nanosync.state import MemoryConfigStore

        store = MemoryConfigStore()
        filters = store.load()
        engine = CheckpointEngine(
            OutputWriter(Path("out")), SnapshotCache(Path("cfg"))
        )
        result = engine.reconcile(filters, "ads.txt", "A\\nB\\n")
        store.save(filters)
        ```
"""

from __future__ import annotations

from nanosync.artifacts import OutputWriter
from nanosync.cache import SnapshotCache
from nanosync.config import DEFAULT_OPTIONS, SyncOptions
from nanosync.diffing import create_patch
from nanosync.history import HistoryOk, HistoryReset, VersionMeta, read_history
from nanosync.io import sha256_text
from nanosync.logging import Logger, get_global_logger
from nanosync.results import (
    ACTION_CHECKPOINT,
    ACTION_PATCH,
    ACTION_UNCHANGED,
    ReconcileResult,
)
from nanosync.state import FilterState

# Roughly a week of history at one or two builds per day
ROLLOVER_THRESHOLD = 10


class CheckpointEngine:
    """Decides between checkpoint and patch and writes the result.

    Attributes:
        writer: Output directory writer.
        cache: Snapshot cache.
        options: Sync options.

    """

    def __init__(
        self,
        writer: OutputWriter,
        cache: SnapshotCache,
        options: SyncOptions = DEFAULT_OPTIONS,
        logger: Logger | None = None,
    ) -> None:
        self.writer = writer
        self.cache = cache
        self.options = options
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger if self._logger is not None else get_global_logger()

    def reconcile(
        self,
        filters: dict[str, FilterState],
        filter_path: str,
        content: str,
    ) -> ReconcileResult:
        """Record 'content' as the next version of 'filter_path'.

        Args:
            filters: Global config mapping. Mutated in place: a new entry is
                added for an unknown filter and the entry's version and
                snapshot reference are updated. The caller persists it.
            filter_path: Config key of the filter.
            content: Current full text of the filter.

        Returns:
            ReconcileResult describing what was written.

        Raises:
            OSError: If the output or cache directory cannot be written.

        """
        state = filters.get(filter_path)
        if state is None:
            state = FilterState()
            filters[filter_path] = state
            self.logger.verbose("ENGINE", f"Tracking new filter: {filter_path}")

        if state.never_built:
            return self._checkpoint(filter_path, state, content, "first build")

        history = read_history(self.writer, self.cache, state.last_file)

        if isinstance(history, HistoryReset):
            self.logger.verbose(
                "HISTORY", f"Broken history ({history.reason}), starting over"
            )
            return self._checkpoint(
                filter_path, state, content, history.reason, recovered=True
            )

        if history.meta.latest != state.last_version:
            reason = (
                f"version mismatch (meta.json latest={history.meta.latest}, "
                f"config lastVersion={state.last_version})"
            )
            self.logger.verbose("HISTORY", f"Inconsistent history, {reason}")
            # Never hand out a version number consumers have already seen
            state.last_version = max(state.last_version, history.meta.latest)
            return self._checkpoint(
                filter_path, state, content, reason, recovered=True
            )

        if history.span > ROLLOVER_THRESHOLD:
            return self._checkpoint(
                filter_path,
                state,
                content,
                f"rollover after {history.span} patches",
            )

        if self.options.skip_if_unchanged and history.snapshot == content:
            self.logger.verbose("ENGINE", "Content unchanged, nothing to record")
            return ReconcileResult(
                filter_path=filter_path,
                output_dir=self.writer.output_dir,
                action=ACTION_UNCHANGED,
                version=state.last_version,
                checkpoint=history.meta.checkpoint,
                latest=history.meta.latest,
                patch_file=None,
                reason=None,
                recovered=False,
                sha256=sha256_text(content),
            )

        return self._patch(filter_path, state, history, content)

    def _checkpoint(
        self,
        filter_path: str,
        state: FilterState,
        content: str,
        reason: str,
        recovered: bool = False,
    ) -> ReconcileResult:
        state.last_version += 1
        if state.last_file is None:
            state.last_file = self.cache.new_ref()
            self.logger.debug("CACHE", f"Assigned snapshot {state.last_file}")

        version = state.last_version
        self.logger.verbose("ENGINE", f"Checkpoint at version {version}: {reason}")

        self.writer.invalidate_meta()
        self.writer.write_checkpoint(content)
        meta = VersionMeta(checkpoint=version, latest=version)
        self.writer.write_meta(meta)
        if self.options.clean_stale_patches:
            self.writer.remove_stale_patches()
        self.cache.write(state.last_file, content)

        return ReconcileResult(
            filter_path=filter_path,
            output_dir=self.writer.output_dir,
            action=ACTION_CHECKPOINT,
            version=version,
            checkpoint=meta.checkpoint,
            latest=meta.latest,
            patch_file=None,
            reason=reason,
            recovered=recovered,
            sha256=sha256_text(content),
        )

    def _patch(
        self,
        filter_path: str,
        state: FilterState,
        history: HistoryOk,
        content: str,
    ) -> ReconcileResult:
        patch_text = create_patch(history.snapshot, content)
        ratio = self.options.max_patch_ratio
        if ratio is not None and len(patch_text) > ratio * len(content):
            return self._checkpoint(
                filter_path,
                state,
                content,
                f"patch of {len(patch_text)} chars exceeds "
                f"{ratio:g} x content size {len(content)}",
            )

        meta = VersionMeta(
            checkpoint=history.meta.checkpoint, latest=history.meta.latest + 1
        )
        state.last_version = meta.latest
        self.logger.verbose(
            "ENGINE", f"Patch {meta.span} -> version {meta.latest}"
        )

        patch_file = self.writer.write_patch(meta.span, patch_text)
        self.writer.write_meta(meta)
        self.cache.write(state.last_file, content)

        return ReconcileResult(
            filter_path=filter_path,
            output_dir=self.writer.output_dir,
            action=ACTION_PATCH,
            version=meta.latest,
            checkpoint=meta.checkpoint,
            latest=meta.latest,
            patch_file=patch_file,
            reason=None,
            recovered=False,
            sha256=sha256_text(content),
        )
