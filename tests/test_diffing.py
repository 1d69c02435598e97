"""
Tests for nanosync.diffing module.

Tests unified diff handling including:
- Patch header format (fixed name and date)
- Round trips over additions, removals and rewrites
- Missing trailing newlines and CRLF line endings
- Rejection of patches that don't match their base
"""

from __future__ import annotations

import pytest

from nanosync.diffing import (
    NO_NEWLINE_MARKER,
    apply_patch,
    create_patch,
    split_lines,
)
from nanosync.exceptions import PatchError


class TestSplitLines:
    """Tests for newline-only line splitting."""

    def test_keeps_terminators(self):
        """Test that each line keeps its newline."""
        assert split_lines("a\nb\n") == ["a\n", "b\n"]

    def test_last_line_without_newline(self):
        """Test that an unterminated last line is kept as is."""
        assert split_lines("a\nb") == ["a\n", "b"]

    def test_empty_text(self):
        """Test that empty text has no lines."""
        assert split_lines("") == []

    def test_carriage_return_stays_in_line(self):
        """Test that \\r is not treated as a line break."""
        assert split_lines("a\r\nb\rc\n") == ["a\r\n", "b\rc\n"]


class TestCreatePatch:
    """Tests for patch generation."""

    def test_header_uses_fixed_name_and_date(self):
        """Test that headers never contain real file names or dates."""
        patch = create_patch("A\n", "B\n")
        lines = patch.splitlines()

        assert lines[0] == "Index: nano-sync-patch"
        assert lines[1] == "=" * 67
        assert lines[2] == "--- nano-sync-patch\tunknown-date"
        assert lines[3] == "+++ nano-sync-patch\tunknown-date"

    def test_adding_a_line(self):
        """Test the diff of appending line C."""
        patch = create_patch("A\nB\n", "A\nB\nC\n")

        assert "@@ -1,2 +1,3 @@\n A\n B\n+C\n" in patch

    def test_identical_texts_have_no_hunks(self):
        """Test that an unchanged text produces only the header."""
        patch = create_patch("A\nB\n", "A\nB\n")

        assert "@@" not in patch
        assert len(patch.splitlines()) == 4

    def test_deterministic(self):
        """Test that the same inputs always give the same patch."""
        assert create_patch("x\ny\n", "x\nz\n") == create_patch("x\ny\n", "x\nz\n")

    def test_marks_missing_newline(self):
        """Test that an unterminated last line is flagged."""
        patch = create_patch("A\n", "A\nB")

        assert f"+B\n{NO_NEWLINE_MARKER}\n" in patch
        assert patch.endswith("\n")


class TestApplyPatch:
    """Tests for patch application."""

    @pytest.mark.parametrize(
        "old, new",
        [
            ("A\nB\n", "A\nB\nC\n"),
            ("A\nB\nC\n", "A\nC\n"),
            ("", "first\nsecond\n"),
            ("gone\n", ""),
            ("A\nB", "A\nB\n"),
            ("A\nB\n", "A\nB"),
            ("A\nB", "A\nC"),
            ("x\r\ny\r\n", "x\r\nz\r\n"),
            ("same\n", "same\n"),
        ],
    )
    def test_round_trip(self, old, new):
        """Test that applying a created patch reproduces the new text."""
        assert apply_patch(old, create_patch(old, new)) == new

    def test_round_trip_with_distant_hunks(self):
        """Test a change at both ends of a long file (two hunks)."""
        old = "".join(f"rule{i}\n" for i in range(100))
        new = "top\n" + old.replace("rule99\n", "rule99-changed\n")

        patch = create_patch(old, new)

        assert patch.count("@@ -") == 2
        assert apply_patch(old, patch) == new

    def test_header_only_patch_is_identity(self):
        """Test that a patch without hunks leaves text unchanged."""
        patch = create_patch("keep\n", "keep\n")

        assert apply_patch("keep\n", patch) == "keep\n"

    def test_wrong_base_raises(self):
        """Test that context mismatch is rejected."""
        patch = create_patch("A\nB\n", "A\nB\nC\n")

        with pytest.raises(PatchError, match="does not apply"):
            apply_patch("X\nY\n", patch)

    def test_hunk_beyond_end_raises(self):
        """Test that a hunk starting past the source is rejected."""
        old = "".join(f"{i}\n" for i in range(20))
        patch = create_patch(old, old + "tail\n")

        with pytest.raises(PatchError):
            apply_patch("short\n", patch)

    def test_malformed_hunk_header_raises(self):
        """Test that garbage after the header is rejected."""
        with pytest.raises(PatchError, match="Malformed hunk header"):
            apply_patch("A\n", "--- a\n+++ b\n@@ nonsense @@\n A\n")

    def test_unexpected_line_raises(self):
        """Test that lines without a diff prefix are rejected."""
        patch = "@@ -1,1 +1,1 @@\n-A\n+B\n?what\n"

        with pytest.raises(PatchError, match="Unexpected line"):
            apply_patch("A\n", patch)

    def test_line_count_mismatch_raises(self):
        """Test that a hunk shorter than its header is rejected."""
        patch = "@@ -1,2 +1,2 @@\n-A\n+B\n"

        with pytest.raises(PatchError, match="line counts"):
            apply_patch("A\nX\n", patch)
