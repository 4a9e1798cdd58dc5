#
# Copyright (C) 2026 The swift-android Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
"""Helper functions and fixed locations within an Android project."""
from __future__ import annotations

from dataclasses import dataclass
import fnmatch
import os
from pathlib import Path
from typing import Callable, Iterator, List, NewType, Optional, Tuple


Abi = NewType('Abi', str)

# The Swift toolchain only targets 32-bit ARM.
DEFAULT_ABI = Abi('armeabi-v7a')

SOURCE_PATTERNS = ('**/*.c', '**/*.h', '**/*.cpp', '**/*.swift')
LIBRARY_PATTERN = '*.so'


def configuration_name(debuggable: bool) -> str:
    """Returns the SwiftPM configuration for a build type."""
    return 'debug' if debuggable else 'release'


@dataclass(frozen=True)
class ProjectLayout:
    """Fixed paths of an Android application module using Swift.

    All paths are derived from the module's project directory.
    """

    project_dir: Path
    abi: Abi = DEFAULT_ABI

    @property
    def swift_dir(self) -> Path:
        """The Swift package root, used as the working directory of SwiftPM."""
        return self.project_dir / 'src/main/swift'

    @property
    def swift_build_dir(self) -> Path:
        """SwiftPM's local build cache."""
        return self.swift_dir / '.build'

    def swift_output_dir(self, debuggable: bool) -> Path:
        """Directory containing the libraries of a SwiftPM build."""
        return self.swift_build_dir / configuration_name(debuggable)

    @property
    def prebuilt_libs_dir(self) -> Path:
        """Libraries placed by swift-install for the target ABI."""
        return self.swift_build_dir / 'jniLibs' / self.abi

    @property
    def jni_libs_dir(self) -> Path:
        """Destination of the libraries packaged into the APK."""
        return self.project_dir / 'src/main/jniLibs' / self.abi

    @property
    def generated_link(self) -> Path:
        """Link that exposes annotation processor output to SwiftPM."""
        return self.swift_build_dir / 'generated'

    def generated_sources_dir(self, variant_dir: str, use_kapt: bool) -> Path:
        """Returns the directory of generated Swift sources for a variant."""
        backend = 'kapt' if use_kapt else 'apt'
        return (self.project_dir / 'build/generated/source' / backend /
                variant_dir / 'SwiftGenerated')

    @property
    def state_dir(self) -> Path:
        """Directory for bookkeeping of incremental builds."""
        return self.swift_build_dir / 'swift-android'

    @property
    def local_properties(self) -> Path:
        return self.project_dir / 'local.properties'

    @property
    def config_file(self) -> Path:
        return self.project_dir / 'swift-android.json'


def walk(
    path: Path,
    top_down: bool = True,
    on_error: Optional[Callable[[OSError], None]] = None,
    follow_links: bool = False,
    directories: bool = True,
    prune: Optional[Callable[[Path], bool]] = None,
) -> Iterator[Path]:
    """Recursively iterates through files in a directory.

    This is a pathlib equivalent of os.walk.

    Args:
        path: Directory tree to walk.
        top_down: If True, walk the tree top-down. If False, walk the tree
                  bottom-up.
        on_error: An error handling callback for any OSError raised by the
                  walk.
        follow_links: If True, walk into symbolic links that resolve to
                      directories.
        directories: If True, the walk will also yield directories.
        prune: Called with each directory found by a top-down walk. If it
               returns True, the directory is neither yielded nor entered.
    Yields:
        A Path for each file (and optionally each directory) in the same manner
        as os.walk.
    """
    for root, dirs, files in os.walk(
        str(path), topdown=top_down, onerror=on_error, followlinks=follow_links
    ):
        root_path = Path(root)
        if prune is not None and top_down:
            dirs[:] = [d for d in dirs if not prune(root_path / d)]
        if directories:
            for dir_name in dirs:
                yield root_path / dir_name
        for file_name in files:
            yield root_path / file_name


def _match_parts(rel_path: str, pattern: str) -> bool:
    # fnmatch's * crosses directory separators, so compare depth first.
    if rel_path.count('/') != pattern.count('/'):
        return False
    return fnmatch.fnmatchcase(rel_path, pattern)


def match_pattern(rel_path: str, pattern: str) -> bool:
    """Matches a relative POSIX path against an Ant-style include pattern.

    `**` is only supported as a leading `**/` ("in any directory") or a
    trailing `/**` ("anything below this directory").

    >>> match_pattern('Sources/main.swift', '**/*.swift')
    True
    >>> match_pattern('Package.swift', '**/*.swift')
    True
    >>> match_pattern('debug/libfoo.so', '*.so')
    False
    >>> match_pattern('.build/debug/main.swift', '.build/**')
    True
    """
    if pattern.endswith('/**'):
        return rel_path.startswith(pattern[:-3] + '/')
    if not pattern.startswith('**/'):
        return _match_parts(rel_path, pattern)
    rest = pattern[3:]
    parts = rel_path.split('/')
    return any(
        _match_parts('/'.join(parts[i:]), rest) for i in range(len(parts)))


@dataclass(frozen=True)
class FileSet:
    """A lazily evaluated set of files below a root directory."""

    root: Path
    includes: Tuple[str, ...]
    excludes: Tuple[str, ...] = ()

    def matches(self, rel_path: str) -> bool:
        if any(match_pattern(rel_path, p) for p in self.excludes):
            return False
        return any(match_pattern(rel_path, p) for p in self.includes)

    def excludes_dir(self, rel_dir: str) -> bool:
        """Returns True if everything below rel_dir is excluded."""
        for pattern in self.excludes:
            if not pattern.endswith('/**'):
                continue
            prefix = pattern[:-3]
            if rel_dir == prefix or rel_dir.startswith(prefix + '/'):
                return True
        return False

    def files(self) -> List[Path]:
        """Returns the sorted list of files currently in the set.

        A missing root is an empty set. Symbolic links to directories are
        followed so that linked generated sources are included. Excluded
        directories are not entered.
        """
        if not self.root.is_dir():
            return []
        found = []
        for path in walk(
                self.root,
                follow_links=True,
                directories=False,
                prune=lambda d: self.excludes_dir(
                    d.relative_to(self.root).as_posix())):
            if self.matches(path.relative_to(self.root).as_posix()):
                found.append(path)
        return sorted(found)

    def __str__(self) -> str:
        return '{}[{}]'.format(self.root, ', '.join(self.includes))
