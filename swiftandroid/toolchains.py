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
"""APIs for locating the Swift Android toolchain and the NDK.

Locations are resolved once per build from local.properties and the
environment. An unresolved location is not an error until a task that needs it
runs, so projects can still be configured (and, for example, cleaned) on
machines without a toolchain.
"""
from __future__ import annotations

from dataclasses import dataclass
import enum
import logging
from pathlib import Path
from typing import AbstractSet, Dict, Mapping, Optional

from swiftandroid.errors import NdkUnresolvedError, ToolchainUnresolvedError
import swiftandroid.properties


DEFAULT_TOOLS_VERSION = '1.9.6-swift5'

TOOLCHAIN_PROPERTY = 'swift-android.dir'
TOOLCHAIN_ENV_VAR = 'SWIFT_ANDROID_HOME'
NDK_PROPERTY = 'ndk.dir'
NDK_ENV_VAR = 'ANDROID_NDK_HOME'


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


@enum.unique
class Requirement(enum.Enum):
    """External locations a task may need before it can run."""

    TOOLCHAIN = 'toolchain'
    NDK = 'ndk'


@dataclass(frozen=True)
class ToolchainConfig:
    """Resolved locations of the Swift toolchain and the NDK.

    Executable paths are None when the toolchain is not resolved. Use
    require() before running anything that depends on them.
    """

    toolchain_dir: Optional[Path]
    ndk_dir: Optional[Path]
    tools_version: str = DEFAULT_TOOLS_VERSION

    def is_toolchain_present(self) -> bool:
        return self.toolchain_dir is not None

    def is_ndk_present(self) -> bool:
        return self.ndk_dir is not None

    def check_toolchain(self) -> None:
        if not self.is_toolchain_present():
            raise ToolchainUnresolvedError(TOOLCHAIN_PROPERTY,
                                           TOOLCHAIN_ENV_VAR)

    def check_ndk(self) -> None:
        if not self.is_ndk_present():
            raise NdkUnresolvedError(NDK_PROPERTY, NDK_ENV_VAR)

    def require(self, requirements: AbstractSet[Requirement]) -> None:
        """Raises if any of the given requirements is not resolved.

        The toolchain is checked before the NDK so the error for the more
        fundamental problem is reported first.
        """
        if Requirement.TOOLCHAIN in requirements:
            self.check_toolchain()
        if Requirement.NDK in requirements:
            self.check_ndk()

    def _toolchain_path(self, *parts: str) -> Optional[Path]:
        if self.toolchain_dir is None:
            return None
        return self.toolchain_dir.joinpath(*parts)

    @property
    def tools_manager_path(self) -> Optional[Path]:
        """The swift-android executable that installs build tools."""
        return self._toolchain_path('bin', 'swift-android')

    @property
    def tools_dir(self) -> Optional[Path]:
        """Directory of the installed build tools for tools_version."""
        return self._toolchain_path('build-tools', self.tools_version)

    @property
    def swift_build_path(self) -> Optional[Path]:
        return self._toolchain_path('build-tools', self.tools_version,
                                    'swift-build')

    @property
    def swift_install_path(self) -> Optional[Path]:
        return self._toolchain_path('build-tools', self.tools_version,
                                    'swift-install')

    @property
    def swift_lib_dir(self) -> Optional[Path]:
        """Swift runtime libraries that must ship with the application."""
        return self._toolchain_path('toolchain', 'usr', 'lib', 'swift',
                                    'android')

    @property
    def swift_env(self) -> Dict[str, str]:
        """Environment additions for tools that only need the toolchain."""
        env = {}
        if self.toolchain_dir is not None:
            env[TOOLCHAIN_ENV_VAR] = str(self.toolchain_dir)
        return env

    @property
    def full_env(self) -> Dict[str, str]:
        """Environment additions for tools that compile for Android."""
        env = self.swift_env
        if self.ndk_dir is not None:
            env[NDK_ENV_VAR] = str(self.ndk_dir)
        return env


def _resolve_dir(local_properties: Mapping[str, str],
                 environ: Mapping[str, str], key: str,
                 env_var: str) -> Optional[Path]:
    value = local_properties.get(key)
    if value:
        logger().debug('Using %s=%s from local.properties', key, value)
        return Path(value)
    value = environ.get(env_var)
    if value:
        logger().debug('Using %s=%s from the environment', env_var, value)
        return Path(value)
    logger().debug('Neither %s nor %s is set', key, env_var)
    return None


def resolve(local_properties: Mapping[str, str],
            environ: Mapping[str, str],
            tools_version: str = DEFAULT_TOOLS_VERSION) -> ToolchainConfig:
    """Resolves toolchain locations.

    For each location the local.properties entry takes precedence over the
    environment variable. Nothing is checked for existence here.

    Args:
        local_properties: Parsed contents of local.properties.
        environ: The process environment.
        tools_version: Version of the build tools to install and use.
    """
    return ToolchainConfig(
        toolchain_dir=_resolve_dir(local_properties, environ,
                                   TOOLCHAIN_PROPERTY, TOOLCHAIN_ENV_VAR),
        ndk_dir=_resolve_dir(local_properties, environ, NDK_PROPERTY,
                             NDK_ENV_VAR),
        tools_version=tools_version)


def resolve_from_file(properties_path: Path,
                      environ: Mapping[str, str],
                      tools_version: str = DEFAULT_TOOLS_VERSION
                      ) -> ToolchainConfig:
    """Resolves toolchain locations from a local.properties file."""
    return resolve(swiftandroid.properties.load(properties_path), environ,
                   tools_version)


def update_properties(config: ToolchainConfig, properties_path: Path) -> None:
    """Persists resolved locations to local.properties.

    Other tools (Android Studio, the NDK's own scripts) read local.properties
    directly, so writing the locations there lets them find the same toolchain
    without the environment. Unresolved locations are left untouched.
    """
    values = {}
    if config.toolchain_dir is not None:
        values[TOOLCHAIN_PROPERTY] = str(config.toolchain_dir)
    if config.ndk_dir is not None:
        values[NDK_PROPERTY] = str(config.ndk_dir)
    if not values:
        logger().warning(
            'Neither the toolchain nor the NDK is resolved. Not updating %s',
            properties_path)
        return
    swiftandroid.properties.update(properties_path, values)
