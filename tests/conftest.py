"""
Pytest configuration and shared fixtures for nano-sync tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from nanosync.core import reconcile
from nanosync.logging import SilentLogger, set_global_logger
from nanosync.results import ReconcileResult


@dataclass
class Workspace:
    """Paths of one filter, its output directory and its config directory."""

    filter_file: Path
    output_dir: Path
    config_dir: Path

    def write(self, content: str) -> None:
        """Replace the filter content, byte for byte."""
        with open(self.filter_file, "w", encoding="utf-8", newline="") as f:
            f.write(content)

    def sync(self, content: str, **kwargs: Any) -> ReconcileResult:
        """Write the filter and record it."""
        self.write(content)
        return reconcile(
            self.filter_file,
            output_dir=self.output_dir,
            config_dir=self.config_dir,
            **kwargs,
        )

    def meta(self) -> dict[str, Any]:
        return json.loads((self.output_dir / "meta.json").read_text(encoding="utf-8"))

    def config(self) -> dict[str, Any]:
        return json.loads(
            (self.config_dir / "config.json").read_text(encoding="utf-8")
        )

    def entry(self) -> dict[str, Any]:
        return self.config()[str(self.filter_file)]

    def read_output(self, name: str) -> str:
        with open(self.output_dir / name, encoding="utf-8", newline="") as f:
            return f.read()

    def patch_names(self) -> list[str]:
        return sorted(
            (p.name for p in self.output_dir.glob("*.patch")),
            key=lambda name: int(name.split(".")[0]),
        )


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Restore the silent global logger after each test (the CLI replaces it)."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def workspace(tmp_test_dir: Path) -> Workspace:
    """Provide a filter file location with separate output and config dirs."""
    filters = tmp_test_dir / "filters"
    filters.mkdir()
    return Workspace(
        filter_file=filters / "ads.txt",
        output_dir=tmp_test_dir / "public" / "ads",
        config_dir=tmp_test_dir / "nano-sync-config",
    )


@pytest.fixture
def sample_versions() -> list[str]:
    """
    Provide a realistic sequence of filter list contents.

    Covers additions, removals, edits and a last line without newline.
    """
    return [
        "! Title: Test List\n||ads.example.com^\n||track.example.net^\n",
        "! Title: Test List\n||ads.example.com^\n||track.example.net^\n||pixel.example.org^\n",
        "! Title: Test List\n||ads.example.com^\n||pixel.example.org^\n",
        "! Title: Test List\n! Version: 4\n||ads.example.com^\n||pixel.example.org^\n##.banner\n",
        "! Title: Test List\n! Version: 5\n||ads.example.com^\n##.banner\n##.sponsored",
        "! Title: Test List\r\n! Version: 6\r\n||ads.example.com^\r\n##.banner\r\n",
    ]


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("settings.yaml", {"key": "value"})
    """

    def _create(filename: str, data: Any) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
