"""
Tests for nanosync.rebuild module.

Tests consumer-side reconstruction including:
- Rebuilding every version of a published directory
- Rebuilding across rollovers and recoveries
- Errors for missing or inconsistent artifacts
"""

from __future__ import annotations

import pytest

from nanosync.engine import ROLLOVER_THRESHOLD
from nanosync.exceptions import HistoryError, PatchError
from nanosync.io import sha256_text
from nanosync.rebuild import rebuild


class TestRebuild:
    """Tests for successful reconstruction."""

    def test_every_version_is_reachable(self, workspace, sample_versions):
        """Test that each recorded version rebuilds byte for byte."""
        for content in sample_versions:
            workspace.sync(content)

        for version, expected in enumerate(sample_versions):
            result = rebuild(workspace.output_dir, version=version)
            assert result.content == expected
            assert result.patches_applied == version
            assert result.sha256 == sha256_text(expected)

    def test_default_is_latest(self, workspace, sample_versions):
        """Test that no version means the latest one."""
        for content in sample_versions:
            last = workspace.sync(content)

        result = rebuild(workspace.output_dir)

        assert result.version == last.version
        assert result.content == sample_versions[-1]
        assert result.sha256 == last.sha256

    def test_after_rollover(self, workspace):
        """Test rebuilding from a checkpoint written by rollover."""
        contents = [f"! v{i}\n||example{i}.com^\n" for i in range(ROLLOVER_THRESHOLD + 5)]
        for content in contents:
            workspace.sync(content)

        result = rebuild(workspace.output_dir)

        assert result.checkpoint == 12
        assert result.version == len(contents) - 1
        assert result.content == contents[-1]

    def test_after_recovery(self, workspace):
        """Test rebuilding after a reset caused by a deleted meta.json."""
        workspace.sync("A\n")
        workspace.sync("A\nB\n")
        (workspace.output_dir / "meta.json").unlink()
        workspace.sync("A\nB\nC\n")
        workspace.sync("A\nC\n")

        result = rebuild(workspace.output_dir)

        assert result.checkpoint == 2
        assert result.version == 3
        assert result.content == "A\nC\n"


class TestRebuildErrors:
    """Tests for reconstruction failures."""

    def test_missing_meta(self, tmp_test_dir):
        """Test an empty directory."""
        with pytest.raises(HistoryError, match="No meta.json"):
            rebuild(tmp_test_dir)

    def test_invalid_meta(self, tmp_test_dir):
        """Test unparsable meta.json."""
        (tmp_test_dir / "meta.json").write_text("not json", encoding="utf-8")

        with pytest.raises(HistoryError, match="Invalid meta.json"):
            rebuild(tmp_test_dir)

    @pytest.mark.parametrize("version", [-1, 1, 4])
    def test_version_out_of_range(self, workspace, version):
        """Test versions outside checkpoint..latest."""
        workspace.sync("A\n")
        workspace.sync("B\n")
        # Reset to a checkpoint at version 2
        (workspace.output_dir / "meta.json").unlink()
        workspace.sync("C\n")
        workspace.sync("D\n")

        with pytest.raises(HistoryError, match="not available"):
            rebuild(workspace.output_dir, version=version)

    def test_missing_checkpoint(self, workspace):
        """Test a directory without checkpoint.txt."""
        workspace.sync("A\n")
        (workspace.output_dir / "checkpoint.txt").unlink()

        with pytest.raises(HistoryError, match="checkpoint.txt"):
            rebuild(workspace.output_dir)

    def test_missing_patch(self, workspace):
        """Test a hole in the patch chain."""
        workspace.sync("A\n")
        workspace.sync("B\n")
        (workspace.output_dir / "1.patch").unlink()

        with pytest.raises(HistoryError, match="1.patch"):
            rebuild(workspace.output_dir)

    def test_patch_that_does_not_apply(self, workspace):
        """Test a checkpoint that no longer matches its patches."""
        workspace.sync("A\nB\n")
        workspace.sync("A\nB\nC\n")
        (workspace.output_dir / "checkpoint.txt").write_text("X\nY\n", encoding="utf-8")

        with pytest.raises(PatchError, match="1.patch"):
            rebuild(workspace.output_dir)
