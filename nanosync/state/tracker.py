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

"""Global config store implementation for nano-sync.

The global config maps each tracked filter path to the state needed to
continue its version chain:

    {
      "filters/ads.txt": {
        "lastFile": "k3v9q0c2m1a8d7e6.txt",
        "lastVersion": 4
      }
    }

- lastFile: Opaque snapshot cache file name, or null if never built
- lastVersion: Version number of the last checkpoint or patch, -1 if
    never built. Whole-number floats such as 4.0 are read as integers.

Loading is best-effort: a missing file or a file that isn't a JSON object
yields an empty mapping (an unparsable file is kept as config.json.backup
so nothing is silently lost). Entries with fields of the wrong type are
caller errors and raise ConfigError.

Example:
    File-backed store:
        ```python
        from pathlib import Path
        from nanosync.state import FilterState, JsonConfigStore

        store = JsonConfigStore(Path("nano-sync-config/config.json"))
        filters = store.load()
        filters.setdefault("filters/ads.txt", FilterState())
        store.save(filters)
        ```

    In-memory store for tests and embedding:
        ```python
        from nanosync.state import MemoryConfigStore

        store = MemoryConfigStore()
        ```

"""

from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Protocol

from nanosync.exceptions import ConfigError
from nanosync.io import write_text_atomic
from nanosync.logging import get_global_logger


@dataclass
class FilterState:
    """Tracking state of one filter path.

    Attributes:
        last_file: Snapshot cache file name, None if never checkpointed.
        last_version: Last version issued for this filter, -1 if never built.

    """

    last_file: str | None = None
    last_version: int = -1

    @property
    def never_built(self) -> bool:
        """True if no snapshot exists for this filter yet."""
        return self.last_file is None

    def to_dict(self) -> dict[str, Any]:
        return {"lastFile": self.last_file, "lastVersion": self.last_version}

    @classmethod
    def from_dict(cls, filter_path: str, data: Any) -> FilterState:
        """Build a FilterState from its JSON form.

        Args:
            filter_path: Key of the entry, used in error messages.
            data: Decoded JSON value of the entry.

        Returns:
            The parsed state.

        Raises:
            ConfigError: If the entry isn't an object or its fields have
                the wrong types.

        """
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config entry for {filter_path!r} must be an object, "
                f"got {type(data).__name__}"
            )

        last_file = data.get("lastFile")
        last_version = data.get("lastVersion", -1)

        if last_file is not None and not isinstance(last_file, str):
            raise ConfigError(
                f"Config entry for {filter_path!r}: 'lastFile' must be a "
                f"string or null, got {type(last_file).__name__}"
            )
        # A hand-edited 4.0 is still version 4
        if isinstance(last_version, float) and last_version.is_integer():
            last_version = int(last_version)
        # bool is an int subclass; true/false are not versions
        if isinstance(last_version, bool) or not isinstance(last_version, int):
            raise ConfigError(
                f"Config entry for {filter_path!r}: 'lastVersion' must be an "
                f"integer, got {type(last_version).__name__}"
            )
        if last_version < -1:
            raise ConfigError(
                f"Config entry for {filter_path!r}: 'lastVersion' must be "
                f">= -1, got {last_version}"
            )

        return cls(last_file=last_file, last_version=last_version)


class ConfigStore(Protocol):
    """Protocol for global config persistence."""

    def load(self) -> dict[str, FilterState]:
        """Return the mapping of filter path to tracking state."""
        ...

    def save(self, filters: dict[str, FilterState]) -> None:
        """Persist the mapping of filter path to tracking state."""
        ...


class JsonConfigStore:
    """Global config store backed by a JSON file.

    Attributes:
        config_file: Path to config.json.

    """

    def __init__(self, config_file: Path):
        self.config_file = config_file

    def load(self) -> dict[str, FilterState]:
        """Load and validate the global config.

        Returns:
            Mapping of filter path to FilterState. Empty if the file is
            missing or unusable.

        Raises:
            ConfigError: If an entry has fields of the wrong type.
            OSError: If the file exists but cannot be read.

        """
        logger = get_global_logger()

        try:
            raw = load_config(self.config_file)
        except FileNotFoundError:
            logger.verbose("STATE", f"No config yet, starting empty: {self.config_file}")
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as err:
            backup = self._backup()
            logger.verbose(
                "STATE",
                f"Warning: unreadable config ({err}), backed up to {backup}",
            )
            return {}

        if not isinstance(raw, dict):
            backup = self._backup()
            logger.verbose(
                "STATE",
                f"Warning: config is not a JSON object, backed up to {backup}",
            )
            return {}

        logger.verbose("STATE", f"Loaded {len(raw)} filter(s) from {self.config_file}")
        return {path: FilterState.from_dict(path, entry) for path, entry in raw.items()}

    def save(self, filters: dict[str, FilterState]) -> None:
        """Write the global config.

        Raises:
            OSError: If the file cannot be written.

        """
        save_config(
            {path: state.to_dict() for path, state in filters.items()},
            self.config_file,
        )
        get_global_logger().verbose("STATE", f"Saved config: {self.config_file}")

    def _backup(self) -> Path:
        backup = self.config_file.with_suffix(".json.backup")
        self.config_file.replace(backup)
        return backup


class MemoryConfigStore:
    """Global config store kept in memory.

    Stores the JSON form of each entry so that loads hand out fresh
    objects, like a file-backed store would.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self.data: dict[str, Any] = dict(initial or {})
        self.saves = 0

    def load(self) -> dict[str, FilterState]:
        return {
            path: FilterState.from_dict(path, entry)
            for path, entry in self.data.items()
        }

    def save(self, filters: dict[str, FilterState]) -> None:
        self.data = {path: state.to_dict() for path, state in filters.items()}
        self.saves += 1


def load_config(config_file: Path) -> Any:
    """Load the raw global config JSON.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        json.JSONDecodeError: If file contains invalid JSON.

    """
    with open(config_file, encoding="utf-8") as f:
        return json.load(f)


def save_config(config: dict[str, Any], config_file: Path) -> None:
    """Save the raw global config JSON.

    Uses 2-space indentation and sorted keys for consistent diffs in
    version control, since config.json is meant to be committed.
    """
    config_file.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(config, indent=2, sort_keys=True) + "\n"
    write_text_atomic(config_file, text)
