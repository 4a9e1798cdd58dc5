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
"""Installs Swift libraries into the application's jniLibs directory."""
from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import shutil
from typing import Dict, List, Tuple

from swiftandroid.errors import FilesystemError
from swiftandroid.paths import FileSet


# rw-r--r--. Libraries are loaded by the runtime, never executed directly.
LIBRARY_FILE_MODE = 0o644


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactCopySpec:
    """Describes which libraries are copied to the application.

    Sources are copied in order. When two sources contain a file with the same
    name the later source wins.
    """

    sources: Tuple[FileSet, ...]
    destination: Path
    file_mode: int = LIBRARY_FILE_MODE

    def plan(self) -> Dict[str, Path]:
        """Maps destination file names to the source file that provides them."""
        selected: Dict[str, Path] = {}
        for source in self.sources:
            for path in source.files():
                selected[path.name] = path
        return selected


def install_file(src_file: Path, dst_file: Path, mode: int) -> None:
    """Copies a single file, replacing the destination and setting its mode."""
    try:
        # Source permissions are not preserved; the destination always ends up
        # with mode.
        if dst_file.is_symlink() or dst_file.exists():
            dst_file.unlink()
        shutil.copyfile(src_file, dst_file)
        dst_file.chmod(mode)
    except OSError as ex:
        raise FilesystemError(dst_file,
                              f'could not install {src_file}: {ex}') from ex


def install_artifacts(spec: ArtifactCopySpec) -> List[Path]:
    """Copies the libraries described by spec.

    Files already in the destination that are not being copied are left
    alone.

    Returns:
        The list of installed files.
    """
    try:
        spec.destination.mkdir(parents=True, exist_ok=True)
    except OSError as ex:
        raise FilesystemError(spec.destination, str(ex)) from ex

    installed = []
    for name, src_file in sorted(spec.plan().items()):
        dst_file = spec.destination / name
        logger().debug('Copying %s to %s', src_file, dst_file)
        install_file(src_file, dst_file, spec.file_mode)
        installed.append(dst_file)
    logger().info('Installed %d libraries to %s', len(installed),
                  spec.destination)
    return installed
