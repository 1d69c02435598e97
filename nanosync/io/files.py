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

"""Text file primitives for nano-sync.

Every file nano-sync writes goes through write_text_atomic(): the text is
written to <name>.part and then renamed over the target, so a reader
never sees a half-written checkpoint, patch or metadata file. Files are
read and written with newline="" so line endings are preserved exactly.

Key Features:

- Atomic writes via .part file + rename
- Byte-exact newline handling (no universal newline translation)
- Cleanup of .part files left behind by an interrupted run

"""

from __future__ import annotations

import hashlib
from pathlib import Path

from nanosync.logging import get_global_logger

PART_SUFFIX = ".part"


def read_text(path: Path) -> str:
    """Read a UTF-8 text file without newline translation.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        UnicodeDecodeError: If the file isn't valid UTF-8.

    """
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_text_atomic(path: Path, text: str) -> None:
    """Write a UTF-8 text file atomically.

    Args:
        path: Destination file. Its directory must exist.
        text: Content to write, unchanged.

    Raises:
        OSError: If the directory is not writable.

    """
    tmp = path.with_name(path.name + PART_SUFFIX)
    with open(tmp, "w", encoding="utf-8", newline="") as f:
        f.write(text)
    get_global_logger().debug("FILE", f"Atomic rename: {tmp.name} -> {path.name}")
    tmp.replace(path)


def remove_partial_files(directory: Path) -> list[Path]:
    """Delete .part files left in a directory by an interrupted write.

    Returns:
        The files that were removed.

    """
    removed = []
    for leftover in sorted(directory.glob(f"*{PART_SUFFIX}")):
        leftover.unlink()
        removed.append(leftover)
    return removed


def sha256_text(text: str) -> str:
    """Return the SHA-256 hex digest of text encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
