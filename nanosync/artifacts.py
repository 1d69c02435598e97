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

"""Output directory artifacts for nano-sync.

The output directory is the public contract handed to consumers:

    filter-diff/
        checkpoint.txt    full content at version meta.checkpoint
        meta.json         {"checkpoint": 3, "latest": 5}
        1.patch           version 3 -> 4
        2.patch           version 4 -> 5

Patch k turns version checkpoint+k-1 into version checkpoint+k.

Writes are atomic per file (see nanosync.io). meta.json is the commit
point: a patch is written before meta.json is bumped, and a checkpoint
first removes meta.json, then replaces checkpoint.txt, then writes the new
meta.json. An interrupted run therefore never leaves meta.json describing
a chain that doesn't replay.
"""

from __future__ import annotations

import json
from pathlib import Path
import re
from typing import Any

from nanosync.history import VersionMeta
from nanosync.io import read_text, remove_partial_files, write_text_atomic
from nanosync.logging import get_global_logger

CHECKPOINT_FILENAME = "checkpoint.txt"
META_FILENAME = "meta.json"
PATCH_SUFFIX = ".patch"

_PATCH_NAME = re.compile(r"^([1-9]\d*)\.patch$")


def patch_filename(number: int) -> str:
    """Return the file name of patch number 'number' (1-based)."""
    return f"{number}{PATCH_SUFFIX}"


class OutputWriter:
    """Reads and writes the artifacts of one output directory.

    Attributes:
        output_dir: The output directory.

    """

    def __init__(self, output_dir: Path):
        self.output_dir = output_dir

    @property
    def checkpoint_path(self) -> Path:
        return self.output_dir / CHECKPOINT_FILENAME

    @property
    def meta_path(self) -> Path:
        return self.output_dir / META_FILENAME

    def patch_path(self, number: int) -> Path:
        return self.output_dir / patch_filename(number)

    def read_meta(self) -> Any:
        """Return the decoded content of meta.json, unvalidated.

        Raises:
            FileNotFoundError: If meta.json doesn't exist.
            json.JSONDecodeError: If meta.json isn't valid JSON.

        """
        return json.loads(read_text(self.meta_path))

    def missing_artifacts(self, meta: VersionMeta) -> list[str]:
        """List the files meta refers to that are not on disk."""
        expected = [self.checkpoint_path] + [
            self.patch_path(n) for n in range(1, meta.span + 1)
        ]
        return [p.name for p in expected if not p.is_file()]

    def invalidate_meta(self) -> None:
        """Remove meta.json ahead of replacing checkpoint.txt.

        Until the new meta.json is written the directory reads as having
        no history, for consumers and for the next run alike.
        """
        if self.meta_path.exists():
            self.meta_path.unlink()
            get_global_logger().debug("OUTPUT", "Removed meta.json before checkpoint")

    def write_checkpoint(self, content: str) -> Path:
        write_text_atomic(self.checkpoint_path, content)
        get_global_logger().verbose("OUTPUT", f"Wrote {self.checkpoint_path}")
        return self.checkpoint_path

    def write_patch(self, number: int, patch_text: str) -> Path:
        path = self.patch_path(number)
        write_text_atomic(path, patch_text)
        get_global_logger().verbose("OUTPUT", f"Wrote {path}")
        return path

    def write_meta(self, meta: VersionMeta) -> None:
        """Commit meta.json.

        Written compactly, e.g. {"checkpoint":0,"latest":1}.
        """
        text = json.dumps(meta.to_dict(), separators=(",", ":"))
        write_text_atomic(self.meta_path, text)
        get_global_logger().verbose(
            "OUTPUT", f"meta.json: checkpoint={meta.checkpoint} latest={meta.latest}"
        )

    def patch_numbers(self) -> list[int]:
        """Return the numbers of all patch files present, ascending."""
        numbers = []
        for path in self.output_dir.glob(f"*{PATCH_SUFFIX}"):
            match = _PATCH_NAME.match(path.name)
            if match and path.is_file():
                numbers.append(int(match.group(1)))
        return sorted(numbers)

    def remove_stale_patches(self, keep: int = 0) -> list[Path]:
        """Delete patch files numbered above 'keep'.

        After a checkpoint every existing patch belongs to an older epoch,
        so the default removes them all.

        Returns:
            The files that were removed.

        """
        removed = []
        for number in self.patch_numbers():
            if number > keep:
                path = self.patch_path(number)
                path.unlink()
                removed.append(path)
        if removed:
            get_global_logger().verbose(
                "OUTPUT", f"Removed {len(removed)} stale patch file(s)"
            )
        return removed

    def recover(self) -> list[Path]:
        """Remove partial files left in the output directory by a crash."""
        removed = remove_partial_files(self.output_dir)
        for path in removed:
            get_global_logger().verbose("OUTPUT", f"Removed partial file {path.name}")
        return removed
