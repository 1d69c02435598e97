"""
Tests for nanosync.history module.

Tests history validation including:
- meta.json parsing and invariants
- Detection of missing meta.json, artifacts and snapshots
- The HistoryOk / HistoryReset outcomes
"""

from __future__ import annotations

import pytest

from nanosync.artifacts import OutputWriter
from nanosync.cache import SnapshotCache
from nanosync.diffing import create_patch
from nanosync.history import (
    HistoryOk,
    HistoryReset,
    VersionMeta,
    read_history,
    replay,
)


@pytest.fixture
def writer(tmp_test_dir):
    out = tmp_test_dir / "out"
    out.mkdir()
    return OutputWriter(out)


@pytest.fixture
def cache(tmp_test_dir):
    cfg = tmp_test_dir / "cfg"
    cfg.mkdir()
    return SnapshotCache(cfg)


def _write_history(writer, cache, meta, snapshot=None):
    """Write a replayable chain of meta.span patches; return its contents."""
    contents = [f"A\nv{n}\n" for n in range(meta.span + 1)]
    writer.write_checkpoint(contents[0])
    for n in range(1, meta.span + 1):
        writer.write_patch(n, create_patch(contents[n - 1], contents[n]))
    writer.write_meta(meta)
    cache.write("snap.txt", contents[-1] if snapshot is None else snapshot)
    return contents


class TestVersionMeta:
    """Tests for VersionMeta validation."""

    def test_from_dict_valid(self):
        """Test parsing valid counters."""
        meta = VersionMeta.from_dict({"checkpoint": 3, "latest": 5})

        assert meta == VersionMeta(checkpoint=3, latest=5)
        assert meta.span == 2

    def test_to_dict(self):
        """Test the on-disk form."""
        assert VersionMeta(0, 1).to_dict() == {"checkpoint": 0, "latest": 1}

    @pytest.mark.parametrize(
        "data",
        [
            {"checkpoint": 0},
            {"latest": 0},
            {"checkpoint": "0", "latest": 0},
            {"checkpoint": 0, "latest": 1.0},
            {"checkpoint": False, "latest": 0},
            {"checkpoint": 5, "latest": 4},
            {"checkpoint": -1, "latest": 0},
            [0, 0],
            None,
        ],
    )
    def test_from_dict_invalid(self, data):
        """Test that malformed counters are rejected."""
        with pytest.raises(ValueError):
            VersionMeta.from_dict(data)


class TestReadHistory:
    """Tests for read_history outcomes."""

    def test_ok(self, writer, cache):
        """Test a complete history."""
        contents = _write_history(writer, cache, VersionMeta(2, 4))

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryOk)
        assert history.meta == VersionMeta(2, 4)
        assert history.snapshot == contents[-1]
        assert history.span == 2

    def test_missing_meta(self, writer, cache):
        """Test that a missing meta.json is a reset."""
        cache.write("snap.txt", "A\n")

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "meta.json is missing" in history.reason

    def test_truncated_meta(self, writer, cache):
        """Test that unparsable meta.json is a reset."""
        _write_history(writer, cache, VersionMeta(0, 0))
        writer.meta_path.write_text('{"checkpoint": 0, "lat', encoding="utf-8")

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "not valid JSON" in history.reason

    def test_wrong_field_types(self, writer, cache):
        """Test that type errors in meta.json are a reset."""
        _write_history(writer, cache, VersionMeta(0, 0))
        writer.meta_path.write_text('{"checkpoint": "0", "latest": 0}', encoding="utf-8")

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "invalid" in history.reason

    def test_missing_checkpoint(self, writer, cache):
        """Test that a deleted checkpoint.txt is a reset."""
        _write_history(writer, cache, VersionMeta(0, 0))
        writer.checkpoint_path.unlink()

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "checkpoint.txt" in history.reason

    def test_missing_patch_in_chain(self, writer, cache):
        """Test that a gap in the patch chain is a reset."""
        _write_history(writer, cache, VersionMeta(0, 3))
        writer.patch_path(2).unlink()

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "2.patch" in history.reason

    def test_missing_snapshot(self, writer, cache):
        """Test that a missing cached snapshot is a reset."""
        _write_history(writer, cache, VersionMeta(0, 0))
        cache.path("snap.txt").unlink()

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "snapshot" in history.reason

    @pytest.mark.parametrize("truncated", ["", "A\n"])
    def test_truncated_snapshot(self, writer, cache, truncated):
        """Test that a snapshot differing from the published chain is a reset."""
        _write_history(writer, cache, VersionMeta(0, 2), snapshot=truncated)

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert history.reason == "cached snapshot does not match published version"

    def test_truncated_checkpoint(self, writer, cache):
        """Test that patches no longer applying to checkpoint.txt is a reset."""
        _write_history(writer, cache, VersionMeta(0, 2))
        writer.checkpoint_path.write_text("", encoding="utf-8")

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "cannot be replayed" in history.reason
        assert "1.patch" in history.reason

    def test_replaced_checkpoint_without_patches(self, writer, cache):
        """Test a checkpoint that changed under an unchanged meta.json."""
        _write_history(writer, cache, VersionMeta(3, 3))
        writer.write_checkpoint("something else\n")

        history = read_history(writer, cache, "snap.txt")

        assert isinstance(history, HistoryReset)
        assert "does not match" in history.reason


class TestReplay:
    """Tests for replaying the published chain."""

    def test_replays_requested_number_of_patches(self, writer, cache):
        """Test stopping part way along the chain."""
        contents = _write_history(writer, cache, VersionMeta(0, 3))

        assert replay(writer, 0) == contents[0]
        assert replay(writer, 2) == contents[2]
        assert replay(writer, 3) == contents[3]

    def test_missing_patch_raises(self, writer, cache):
        """Test that a missing patch surfaces as FileNotFoundError."""
        _write_history(writer, cache, VersionMeta(0, 2))
        writer.patch_path(2).unlink()

        with pytest.raises(FileNotFoundError):
            replay(writer, 2)
