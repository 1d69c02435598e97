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

"""Global config tracking for nano-sync.

This package persists, per tracked filter path, the snapshot cache file
name and the last version issued. It is the source of truth for which
version comes next.

Public API:

- FilterState: Tracking state of one filter path
- ConfigStore: Protocol implemented by stores
- JsonConfigStore: Store backed by <config_dir>/config.json
- MemoryConfigStore: Store kept in memory (tests, embedding)
- load_config: Load raw config JSON
- save_config: Save raw config JSON with pretty-printing

"""

from .tracker import (
    ConfigStore,
    FilterState,
    JsonConfigStore,
    MemoryConfigStore,
    load_config,
    save_config,
)

__all__ = [
    "ConfigStore",
    "FilterState",
    "JsonConfigStore",
    "MemoryConfigStore",
    "load_config",
    "save_config",
]
