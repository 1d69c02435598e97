"""
Sync options loading for nano-sync.

Behaviour that the version chain leaves open is controlled by a small set
of options, resolved in three layers (last wins):

1. **Built-in defaults** (DEFAULT_OPTIONS)
2. **settings.yaml** in the config directory, if present
3. **Overrides** passed by the caller (CLI flags); None means "not set"

Options
-------
skip_if_unchanged : bool (default False)
    Do not consume a version when the filter content is identical to the
    cached snapshot. The default keeps every run versioned, writing an
    empty patch for an unchanged filter.
max_patch_ratio : number or null (default null)
    When set, a patch longer than ratio * len(content) is replaced by a
    fresh checkpoint. Null disables the check.
clean_stale_patches : bool (default True)
    Delete *.patch files of the previous epoch when a checkpoint is
    written, so the output directory only holds patches that apply to the
    current checkpoint.

The rollover threshold (10 patches per checkpoint) is fixed and cannot be
set here.

Example settings.yaml
---------------------

    skip_if_unchanged: true
    max_patch_ratio: 0.5

Error Handling
--------------
- Missing settings.yaml: defaults are used
- Empty settings.yaml: defaults are used
- YAML parse errors, non-mapping content, wrong option types: ConfigError
- Unknown keys: ignored with a verbose warning

Examples
--------
    >>> from pathlib import Path
    >>> from nanosync.config import load_sync_options
    >>> opts = load_sync_options(Path("nano-sync-config"))
    >>> opts.skip_if_unchanged
    False

    >>> opts = load_sync_options(
    ...     Path("nano-sync-config"), overrides={"skip_if_unchanged": True}
    ... )
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

from nanosync.exceptions import ConfigError
from nanosync.logging import get_global_logger

SETTINGS_FILENAME = "settings.yaml"

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class SyncOptions:
    """Resolved sync options."""

    skip_if_unchanged: bool = False
    max_patch_ratio: float | None = None
    clean_stale_patches: bool = True


DEFAULT_OPTIONS = SyncOptions()


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Returns None for an empty file.

    Raises:
      FileNotFoundError      - when file does not exist
      ConfigError            - for invalid YAML (parse error) with chained context
    """
    if not p.exists():
        raise FileNotFoundError(f"file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err


# -------------------------------
# Validation
# -------------------------------


def _validate_options(values: dict[str, Any], source: str) -> dict[str, Any]:
    """
    Check option types and drop unknown keys.

    'source' names where the values came from, for error messages.
    """
    logger = get_global_logger()
    known = set(asdict(DEFAULT_OPTIONS))
    result: dict[str, Any] = {}

    for key, value in values.items():
        if key not in known:
            logger.verbose("CONFIG", f"Ignoring unknown option {key!r} in {source}")
            continue

        if key in ("skip_if_unchanged", "clean_stale_patches"):
            if not isinstance(value, bool):
                raise ConfigError(
                    f"{source}: {key!r} must be true or false, got {value!r}"
                )
        elif key == "max_patch_ratio" and value is not None:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{source}: {key!r} must be a number, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{source}: {key!r} must be positive, got {value!r}")
            value = float(value)

        result[key] = value

    return result


# -------------------------------
# Public API
# -------------------------------


def load_sync_options(
    config_dir: Path,
    overrides: dict[str, Any] | None = None,
) -> SyncOptions:
    """
    Resolve the effective sync options for a config directory.

    Steps
      1) Start from DEFAULT_OPTIONS.
      2) Overlay <config_dir>/settings.yaml if it exists.
      3) Overlay caller overrides whose value is not None.

    Returns
      A frozen SyncOptions.

    Raises
      ConfigError on YAML parse errors, non-mapping content or bad option
      types, in the file or in the overrides.
    """
    logger = get_global_logger()
    merged: dict[str, Any] = asdict(DEFAULT_OPTIONS)

    settings_path = config_dir / SETTINGS_FILENAME
    if settings_path.exists():
        logger.verbose("CONFIG", f"Loading: {settings_path}")
        data = _load_yaml_file(settings_path)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"top-level YAML must be a mapping (dict): {settings_path}"
            )
        merged.update(_validate_options(data, str(settings_path)))

    if overrides:
        explicit = {k: v for k, v in overrides.items() if v is not None}
        merged.update(_validate_options(explicit, "overrides"))

    options = SyncOptions(**merged)
    logger.debug("CONFIG", f"Effective options: {options}")
    return options
