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

"""File I/O helpers for nano-sync.

Public API:

read_text : function
    Read a text file without newline translation.
write_text_atomic : function
    Write a text file via a .part file and an atomic rename.
remove_partial_files : function
    Delete .part files left behind by an interrupted run.
sha256_text : function
    SHA-256 digest of a text.

"""

from .files import read_text, remove_partial_files, sha256_text, write_text_atomic

__all__ = ["read_text", "write_text_atomic", "remove_partial_files", "sha256_text"]
