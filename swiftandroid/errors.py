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
"""Errors raised while configuring or running the Swift build."""
from __future__ import annotations

from pathlib import Path
import shlex
from typing import Sequence


class SwiftAndroidError(RuntimeError):
    """Base class for all errors reported to the user."""


class ConfigurationError(SwiftAndroidError):
    """The project or variant configuration is not usable.

    Raised while the task graph is being constructed, before any process runs.
    """


class ToolchainUnresolvedError(SwiftAndroidError):
    """A task needs the Swift toolchain but its location is unknown."""

    def __init__(self, properties_key: str, env_var: str) -> None:
        super().__init__(
            f"Swift Toolchain location not found. Define location with "
            f"{properties_key} in the local.properties file or with an "
            f"{env_var} environment variable.")
        self.properties_key = properties_key
        self.env_var = env_var


class NdkUnresolvedError(SwiftAndroidError):
    """A task needs the NDK but its location is unknown."""

    def __init__(self, properties_key: str, env_var: str) -> None:
        super().__init__(
            f"NDK location not found. Define location with {properties_key} "
            f"in the local.properties file or with an {env_var} environment "
            f"variable.")
        self.properties_key = properties_key
        self.env_var = env_var


class ExternalProcessFailure(SwiftAndroidError):
    """An external command exited with a non-zero status."""

    def __init__(self, cmd: Sequence[str], returncode: int,
                 cwd: Path | None = None) -> None:
        super().__init__(
            f"Command failed with exit code {returncode}: "
            f"CWD={cwd or Path.cwd()} {shlex.join(cmd)}")
        self.cmd = list(cmd)
        self.returncode = returncode
        self.cwd = cwd


class FilesystemError(SwiftAndroidError):
    """A filesystem operation on the given path failed."""

    def __init__(self, path: Path, msg: str) -> None:
        super().__init__(f"{path}: {msg}")
        self.path = path


class CyclicDependencyError(SwiftAndroidError):
    """An error indicating a cyclic dependency in the task graph."""

    def __init__(self, names: Sequence[str]) -> None:
        super().__init__('Detected cyclic dependency: {}'.format(
            ' -> '.join(names)))
        self.names = list(names)
