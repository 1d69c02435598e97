"""
nano-sync - differential updates for filter lists

A Python toolkit that keeps a versioned history of a filter list as one
full checkpoint plus a short chain of unified-diff patches, so that
ad blockers can update by downloading a few small patches instead of the
whole list.

nano-sync provides:
  - Automatic checkpoint vs. patch decision with a fixed rollover limit
  - Self-healing: a missing or corrupt history is replaced by a checkpoint
  - Atomic writes and recovery from interrupted runs
  - Optional policies for unchanged content and oversized patches
  - Consumer-side reconstruction to verify published output

Quick Start
-----------
Record the current content of a filter:

    $ nsync filters/ads.txt

Rebuild the latest version from the published output:

    $ nsync-rebuild filters/ads-diff

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    High-level reconcile() entry point.
engine : module
    Checkpoint/patch state machine.
history : module
    meta.json validation and history checks.
artifacts : module
    Output directory writer.
cache : module
    Private snapshot cache.
diffing : module
    Unified diff creation and application.
rebuild : module
    Consumer-side reconstruction.
config : package
    settings.yaml loading.
state : package
    Global config store.
io : package
    Atomic file primitives.

Public API
----------
    from nanosync import reconcile, rebuild
    from nanosync.diffing import create_patch, apply_patch
    from nanosync.state import JsonConfigStore, MemoryConfigStore

Project Information
-------------------
License: Apache-2.0
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "Differential update files for filter lists"

# Re-export commonly used functions for convenience
from nanosync.config import SyncOptions, load_sync_options
from nanosync.core import reconcile
from nanosync.diffing import apply_patch, create_patch
from nanosync.rebuild import rebuild
from nanosync.results import RebuildResult, ReconcileResult

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "reconcile",
    "rebuild",
    "create_patch",
    "apply_patch",
    "load_sync_options",
    "SyncOptions",
    "ReconcileResult",
    "RebuildResult",
]
