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
"""Exposes annotation processor output to SwiftPM."""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from swiftandroid.errors import FilesystemError


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedSourceLink:
    """A symlink at link pointing to target."""

    link: Path
    target: Path

    @property
    def relative_target(self) -> Path:
        """The link target, relative to the directory containing the link."""
        return Path(os.path.relpath(self.target, self.link.parent))


def make_symlink(src: Path, dest: Path) -> None:
    """Replaces src with a relative symlink pointing to dest."""
    src.unlink(missing_ok=True)
    if dest.is_absolute():
        src.symlink_to(Path(os.path.relpath(dest, src.parent)))
    else:
        src.symlink_to(dest)


def link_generated_sources(spec: GeneratedSourceLink) -> None:
    """Recreates the generated sources link.

    The link is always deleted and created again so that switching variants
    never leaves it pointing at another variant's sources. The target does not
    need to exist yet.
    """
    logger().info('Linking %s -> %s', spec.link, spec.relative_target)
    try:
        spec.link.parent.mkdir(parents=True, exist_ok=True)
        make_symlink(spec.link, spec.target)
    except OSError as ex:
        raise FilesystemError(spec.link, str(ex)) from ex
