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

"""Snapshot cache for nano-sync.

The snapshot cache keeps the last raw content of every tracked filter in
the config directory, under an opaque generated name such as
"5f0c9a1e7b3d42c8a6e1f09d.txt". The next run diffs against it.

These files are private working storage: consumers only ever see the
output directory. Add "nano-sync-config/*.txt" to .gitignore and commit
config.json only.
"""

from __future__ import annotations

from pathlib import Path
import secrets

from nanosync.io import read_text, remove_partial_files, write_text_atomic
from nanosync.logging import get_global_logger

REF_SUFFIX = ".txt"


class SnapshotCache:
    """Directory of cached filter snapshots keyed by opaque references.

    Attributes:
        directory: Cache directory (the config directory).

    """

    def __init__(self, directory: Path):
        self.directory = directory

    def new_ref(self) -> str:
        """Generate a reference that is not used by any cached file."""
        while True:
            ref = secrets.token_hex(12) + REF_SUFFIX
            if not self.path(ref).exists():
                return ref

    def path(self, ref: str) -> Path:
        return self.directory / ref

    def read(self, ref: str) -> str:
        """Return cached content.

        Raises:
            FileNotFoundError: If nothing is cached under ref.
            UnicodeDecodeError: If the cached file is damaged.

        """
        return read_text(self.path(ref))

    def write(self, ref: str, content: str) -> None:
        """Replace the cached content under ref."""
        write_text_atomic(self.path(ref), content)
        get_global_logger().verbose("CACHE", f"Updated snapshot {ref}")

    def recover(self) -> None:
        """Remove partial files left in the cache directory by a crash."""
        for path in remove_partial_files(self.directory):
            get_global_logger().verbose("CACHE", f"Removed partial file {path.name}")
