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

"""Version history of an output directory.

The history of a filter is everything the next patch depends on:

- meta.json in the output directory ({"checkpoint": int, "latest": int})
- checkpoint.txt and the patches 1..latest-checkpoint next to it
- the cached snapshot of the previous content, which must equal
  checkpoint.txt with the patches applied

read_history() never raises for a broken history. It returns either
HistoryOk with the validated metadata and snapshot, or HistoryReset with
a human-readable reason, and the engine answers a reset with a fresh
checkpoint.

Example:
    Inspecting the history of an output directory:
        ```python
        history = read_history(writer, cache, "5f0c9a1e.txt")
        if isinstance(history, HistoryReset):
            print(f"Starting over: {history.reason}")
        else:
            print(f"{history.span} patch(es) since checkpoint")
        ```
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import TYPE_CHECKING, Any, Union

from nanosync.diffing import apply_patch
from nanosync.exceptions import PatchError
from nanosync.io import read_text
from nanosync.logging import get_global_logger

if TYPE_CHECKING:
    from nanosync.artifacts import OutputWriter
    from nanosync.cache import SnapshotCache


@dataclass(frozen=True)
class VersionMeta:
    """Version counters of an output directory.

    Attributes:
        checkpoint: Version stored in checkpoint.txt.
        latest: Most recent version reachable by applying patches.

    """

    checkpoint: int
    latest: int

    @property
    def span(self) -> int:
        """Number of patches issued since the checkpoint."""
        return self.latest - self.checkpoint

    def to_dict(self) -> dict[str, int]:
        return {"checkpoint": self.checkpoint, "latest": self.latest}

    @classmethod
    def from_dict(cls, data: Any) -> VersionMeta:
        """Validate decoded meta.json content.

        Raises:
            ValueError: If fields are missing, not integers, or violate
                latest >= checkpoint >= 0.

        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")

        values = {}
        for field in ("checkpoint", "latest"):
            value = data.get(field)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{field!r} must be an integer, got {value!r}")
            values[field] = value

        meta = cls(**values)
        if not meta.latest >= meta.checkpoint >= 0:
            raise ValueError(
                f"counters out of order (checkpoint={meta.checkpoint}, "
                f"latest={meta.latest})"
            )
        return meta


@dataclass(frozen=True)
class HistoryOk:
    """A usable history: patching can continue from here."""

    meta: VersionMeta
    snapshot: str

    @property
    def span(self) -> int:
        return self.meta.span


@dataclass(frozen=True)
class HistoryReset:
    """A history that cannot be continued, with the reason why."""

    reason: str


History = Union[HistoryOk, HistoryReset]


def read_history(writer: OutputWriter, cache: SnapshotCache, ref: str) -> History:
    """Load and validate the history needed to write the next patch.

    Args:
        writer: Writer of the output directory holding meta.json.
        cache: Snapshot cache holding the previous content.
        ref: Cache reference of the filter.

    Returns:
        HistoryOk if metadata, artifacts and snapshot are all usable,
        HistoryReset otherwise.

    """
    logger = get_global_logger()

    try:
        raw = writer.read_meta()
    except FileNotFoundError:
        return HistoryReset("meta.json is missing")
    except json.JSONDecodeError as err:
        return HistoryReset(f"meta.json is not valid JSON: {err}")
    except (OSError, UnicodeDecodeError) as err:
        return HistoryReset(f"meta.json cannot be read: {err}")

    try:
        meta = VersionMeta.from_dict(raw)
    except ValueError as err:
        return HistoryReset(f"meta.json is invalid: {err}")
    logger.debug("HISTORY", f"meta.json: {meta.to_dict()}")

    missing = writer.missing_artifacts(meta)
    if missing:
        return HistoryReset(f"missing artifact(s): {', '.join(missing)}")

    try:
        snapshot = cache.read(ref)
    except FileNotFoundError:
        return HistoryReset(f"cached snapshot {ref} is missing")
    except (OSError, UnicodeDecodeError) as err:
        return HistoryReset(f"cached snapshot {ref} cannot be read: {err}")

    # The next patch is diffed against the snapshot, so it must be exactly
    # what consumers get by replaying the published chain.
    try:
        published = replay(writer, meta.span)
    except (OSError, UnicodeDecodeError, PatchError) as err:
        return HistoryReset(f"published chain cannot be replayed: {err}")
    if published != snapshot:
        return HistoryReset("cached snapshot does not match published version")

    return HistoryOk(meta=meta, snapshot=snapshot)


def replay(writer: OutputWriter, count: int) -> str:
    """Apply patches 1..count to checkpoint.txt and return the result.

    Raises:
        FileNotFoundError: If checkpoint.txt or one of the patches is missing.
        PatchError: If a patch does not apply, prefixed with its file name.

    """
    content = read_text(writer.checkpoint_path)
    for number in range(1, count + 1):
        path = writer.patch_path(number)
        try:
            content = apply_patch(content, read_text(path))
        except PatchError as err:
            raise PatchError(f"{path.name}: {err}") from err
        get_global_logger().debug("HISTORY", f"Replayed {path.name}")
    return content
