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

"""Unified diff creation and application for nano-sync.

Patches are plain unified diffs with a fixed file name and a fixed
placeholder date, so the same pair of texts always produces the same
patch regardless of when or where it was built:

    Index: nano-sync-patch
    ===================================================================
    --- nano-sync-patch	unknown-date
    +++ nano-sync-patch	unknown-date
    @@ -1,2 +1,3 @@
     A
     B
    +C

Lines are split on "\\n" only, so "\\r\\n" line endings and stray control
characters survive byte for byte. A final line without a newline is
marked with "\\ No newline at end of file" as diff(1) does.

Both functions are pure: no I/O, no state.

Example:
    Round trip:
        ```python
        from nanosync.diffing import apply_patch, create_patch

        patch = create_patch("A\\nB\\n", "A\\nB\\nC\\n")
        assert apply_patch("A\\nB\\n", patch) == "A\\nB\\nC\\n"
        ```
"""

from __future__ import annotations

import difflib
import itertools
import re

from nanosync.exceptions import PatchError

PATCH_NAME = "nano-sync-patch"
PLACEHOLDER_DATE = "unknown-date"
CONTEXT_LINES = 3
NO_NEWLINE_MARKER = "\\ No newline at end of file"

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def split_lines(text: str) -> list[str]:
    """Split text into lines on "\\n", keeping the line terminators.

    Unlike str.splitlines(), carriage returns and other separators stay
    inside the line they belong to.
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def create_patch(
    old_text: str,
    new_text: str,
    name: str = PATCH_NAME,
    date: str = PLACEHOLDER_DATE,
) -> str:
    """Create a unified diff transforming old_text into new_text.

    Args:
        old_text: Text of the previous version.
        new_text: Text of the next version.
        name: File name written in the patch headers.
        date: Date written in the patch headers. Not meaningful; kept
            constant so identical inputs give identical patches.

    Returns:
        The patch text. Identical inputs yield the four header lines and
        no hunks.

    """
    header = [
        f"Index: {name}\n",
        "=" * 67 + "\n",
        f"--- {name}\t{date}\n",
        f"+++ {name}\t{date}\n",
    ]

    diff = difflib.unified_diff(
        split_lines(old_text), split_lines(new_text), n=CONTEXT_LINES
    )
    body = []
    # difflib's own ---/+++ lines are replaced by the fixed header above
    for line in itertools.islice(diff, 2, None):
        if line.endswith("\n"):
            body.append(line)
        else:
            body.append(f"{line}\n{NO_NEWLINE_MARKER}\n")

    return "".join(header + body)


def apply_patch(old_text: str, patch_text: str) -> str:
    """Apply a unified diff created by create_patch() to old_text.

    Hunks are applied strictly: every context and removed line must match
    the source at the position given by the hunk header. No fuzz, no
    offset search.

    Args:
        old_text: Text the patch was created against.
        patch_text: Unified diff text.

    Returns:
        The patched text.

    Raises:
        PatchError: If a hunk header is malformed, hunks overlap or go
            out of order, or a hunk's context does not match old_text.

    """
    source = split_lines(old_text)
    lines = split_lines(patch_text)
    result: list[str] = []
    pos = 0

    i = 0
    while i < len(lines) and not lines[i].startswith("@@"):
        i += 1

    hunk_no = 0
    while i < len(lines):
        match = _HUNK_HEADER.match(lines[i])
        if not match:
            raise PatchError(f"Malformed hunk header: {lines[i].rstrip()!r}")
        hunk_no += 1
        old_start = int(match.group(1))
        old_len = int(match.group(2) or 1)
        new_len = int(match.group(4) or 1)
        i += 1

        # Empty ranges name the line just before the insertion point
        start = old_start if old_len == 0 else old_start - 1
        if start < pos or start > len(source):
            raise PatchError(
                f"Hunk {hunk_no} starts at line {old_start}, outside the "
                f"remaining {len(source) - pos} source line(s)"
            )
        result.extend(source[pos:start])
        pos = start

        old_chunk: list[str] = []
        new_chunk: list[str] = []
        last_tag = None
        while i < len(lines) and not lines[i].startswith("@@"):
            line = lines[i]
            tag, text = line[:1], line[1:]
            if tag == " ":
                old_chunk.append(text)
                new_chunk.append(text)
            elif tag == "-":
                old_chunk.append(text)
            elif tag == "+":
                new_chunk.append(text)
            elif tag == "\\" and last_tag is not None:
                if last_tag in (" ", "-"):
                    old_chunk[-1] = old_chunk[-1].removesuffix("\n")
                if last_tag in (" ", "+"):
                    new_chunk[-1] = new_chunk[-1].removesuffix("\n")
            else:
                raise PatchError(
                    f"Unexpected line in hunk {hunk_no}: {line.rstrip()!r}"
                )
            last_tag = tag
            i += 1

        if len(old_chunk) != old_len or len(new_chunk) != new_len:
            raise PatchError(
                f"Hunk {hunk_no} line counts do not match its header "
                f"(-{len(old_chunk)}/+{len(new_chunk)} vs "
                f"-{old_len}/+{new_len})"
            )
        if source[pos : pos + old_len] != old_chunk:
            raise PatchError(
                f"Hunk {hunk_no} does not apply at line {pos + 1}"
            )

        result.extend(new_chunk)
        pos += old_len

    result.extend(source[pos:])
    return "".join(result)
