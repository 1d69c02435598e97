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

"""Sync options for nano-sync.

Options are read from an optional settings.yaml in the config directory
and can be overridden per call (the CLI maps its flags onto overrides).

Public API:

- SyncOptions: Frozen dataclass of resolved options
- DEFAULT_OPTIONS: Options used when nothing is configured
- load_sync_options: Resolve options for a config directory

Example:
    Basic usage:

        from pathlib import Path
        from nanosync.config import load_sync_options

        options = load_sync_options(Path("nano-sync-config"))
        print(options.skip_if_unchanged)  # False

"""

from .loader import DEFAULT_OPTIONS, SyncOptions, load_sync_options

__all__ = ["DEFAULT_OPTIONS", "SyncOptions", "load_sync_options"]
