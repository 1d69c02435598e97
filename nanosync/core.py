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

"""Core orchestration for nano-sync.

This module provides reconcile(), the one-call entry point that records
the current content of a filter file as its next version.

Directory layout with the defaults:

    filters/ads.txt              the tracked filter
    filters/ads-diff/            output directory, publish this
    nano-sync-config/config.json global config, commit this
    nano-sync-config/*.txt       snapshot cache, ignore this
    nano-sync-config/settings.yaml  optional sync options

Design Principles:

- The engine works on an in-memory config mapping; loading and saving it
    is done here, once per call, through an injectable ConfigStore
- Error handling uses exceptions; the CLI layer formats for user display
- Broken history is repaired, never raised

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from nanosync.core import reconcile

        result = reconcile(Path("filters/ads.txt"))
        print(f"{result.action} -> version {result.version}")
        ```

"""

from __future__ import annotations

from pathlib import Path

from nanosync.artifacts import OutputWriter
from nanosync.cache import SnapshotCache
from nanosync.config import SyncOptions, load_sync_options
from nanosync.engine import CheckpointEngine
from nanosync.exceptions import ConfigError, FilterNotFoundError
from nanosync.io import read_text
from nanosync.logging import get_global_logger
from nanosync.results import ReconcileResult
from nanosync.state import ConfigStore, JsonConfigStore

DEFAULT_CONFIG_DIR = Path("nano-sync-config")
CONFIG_FILENAME = "config.json"
OUTPUT_DIR_SUFFIX = "-diff"


def default_output_dir(filter_path: Path) -> Path:
    """Return the output directory used when none is given.

    Example:
        ```python
        default_output_dir(Path("filters/ads.txt"))
        # Returns: Path('filters/ads-diff')
        ```

    """
    return filter_path.parent / f"{filter_path.stem}{OUTPUT_DIR_SUFFIX}"


def reconcile(
    filter_path: str | Path,
    output_dir: str | Path | None = None,
    config_dir: str | Path = DEFAULT_CONFIG_DIR,
    *,
    store: ConfigStore | None = None,
    options: SyncOptions | None = None,
    overrides: dict | None = None,
) -> ReconcileResult:
    """Record the current content of a filter as its next version.

    Steps:

    1. Validate arguments and read the filter file
    2. Create the output and config directories
    3. Resolve sync options (settings.yaml + overrides) unless given
    4. Remove partial files left by an interrupted run
    5. Load the global config, run the engine, save the global config

    Args:
        filter_path: Path of the filter file. Its string form is the key
            in config.json, so use the same spelling on every run.
        output_dir: Output directory. Default is "<stem>-diff" next to
            the filter.
        config_dir: Directory of config.json and the snapshot cache.
            Default is "nano-sync-config" in the working directory.
        store: Global config store. Default is config.json in config_dir.
        options: Resolved sync options. When None they are loaded from
            config_dir with 'overrides' applied.
        overrides: Option values taking precedence over settings.yaml;
            None values are ignored.

    Returns:
        ReconcileResult describing the recorded version.

    Raises:
        ConfigError: On invalid arguments, bad settings.yaml, or
            config.json entries of the wrong type.
        FilterNotFoundError: If the filter file doesn't exist.
        OSError: If a directory cannot be created or written.

    Example:
        Custom locations:
            ```python
            result = reconcile(
                "ads.txt", output_dir="public/ads", config_dir=".nsync"
            )
            ```

    """
    logger = get_global_logger()

    # 1. Arguments and filter content
    if not isinstance(filter_path, (str, Path)) or not str(filter_path):
        raise ConfigError(f"filter path must be a non-empty path, got {filter_path!r}")
    filter_key = str(filter_path)
    filter_file = Path(filter_path)

    if output_dir is None:
        output_dir = default_output_dir(filter_file)
    if not isinstance(output_dir, (str, Path)) or not str(output_dir):
        raise ConfigError(f"output directory must be a non-empty path, got {output_dir!r}")
    if not isinstance(config_dir, (str, Path)) or not str(config_dir):
        raise ConfigError(f"config directory must be a non-empty path, got {config_dir!r}")
    output_dir = Path(output_dir)
    config_dir = Path(config_dir)

    logger.step(1, 4, "Reading filter...")
    if not filter_file.is_file():
        raise FilterNotFoundError(f"Filter file not found: {filter_file}")
    try:
        content = read_text(filter_file)
    except UnicodeDecodeError as err:
        raise ConfigError(f"Filter file is not UTF-8 text: {filter_file}") from err
    logger.verbose("ENGINE", f"Read {len(content)} chars from {filter_file}")

    # 2. Directories
    output_dir.mkdir(parents=True, exist_ok=True)
    config_dir.mkdir(parents=True, exist_ok=True)

    # 3. Options
    logger.step(2, 4, "Loading configuration...")
    if options is None:
        options = load_sync_options(config_dir, overrides)
    if store is None:
        store = JsonConfigStore(config_dir / CONFIG_FILENAME)

    writer = OutputWriter(output_dir)
    cache = SnapshotCache(config_dir)

    # 4. Startup recovery
    writer.recover()
    cache.recover()

    # 5. Engine
    filters = store.load()
    logger.step(3, 4, "Reconciling versions...")
    engine = CheckpointEngine(writer, cache, options)
    result = engine.reconcile(filters, filter_key, content)

    logger.step(4, 4, "Saving state...")
    store.save(filters)

    return result
