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
"""Project configuration and build variants.

The configuration lives in swift-android.json next to the module's
build.gradle. Every key is optional:

    {
        "tools_version": "1.9.6-swift5",
        "use_kapt": false,
        "use_package_clean": false,
        "clean_enabled": true,
        "debug": {"extra_build_flags": [], "extra_install_flags": []},
        "release": {"extra_build_flags": [], "extra_install_flags": []},
        "build_types": {"debug": {"debuggable": true},
                        "release": {"debuggable": false}},
        "product_flavors": [],
        "ndk_compile": false,
        "external_native_build": false,
        "host_tasks": null
    }

When host_tasks is null, the names of the Android plugin tasks are derived
from the variants and the ndk_compile and external_native_build switches.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from swiftandroid.errors import ConfigurationError
import swiftandroid.paths
from swiftandroid.toolchains import DEFAULT_TOOLS_VERSION


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


def capitalize(name: str) -> str:
    """Capitalizes a variant name the way Gradle does for task names.

    >>> capitalize('freeDebug')
    'FreeDebug'
    """
    return name[:1].upper() + name[1:]


@dataclass(frozen=True)
class FlagSet:
    """Extra SwiftPM flags for debuggable or non-debuggable builds."""

    extra_build_flags: Tuple[str, ...] = ()
    extra_install_flags: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BuildType:
    name: str
    debuggable: bool


DEFAULT_BUILD_TYPES = (
    BuildType('debug', debuggable=True),
    BuildType('release', debuggable=False),
)


@dataclass(frozen=True)
class BuildVariant:
    """A single build type/product flavor combination of the application."""

    name: str
    dir_name: str
    debuggable: bool
    extra_build_flags: Tuple[str, ...] = ()
    extra_install_flags: Tuple[str, ...] = ()

    @property
    def task_suffix(self) -> str:
        return capitalize(self.name)

    @property
    def configuration(self) -> str:
        return swiftandroid.paths.configuration_name(self.debuggable)


@dataclass(frozen=True)
class ProjectConfig:
    """Per-module settings of the Swift build."""

    tools_version: str = DEFAULT_TOOLS_VERSION
    use_kapt: bool = False
    use_package_clean: bool = False
    clean_enabled: bool = True
    debug: FlagSet = field(default_factory=FlagSet)
    release: FlagSet = field(default_factory=FlagSet)
    build_types: Tuple[BuildType, ...] = DEFAULT_BUILD_TYPES
    product_flavors: Tuple[str, ...] = ()
    ndk_compile: bool = False
    external_native_build: bool = False
    host_tasks: Optional[FrozenSet[str]] = None

    def flags_for(self, debuggable: bool) -> FlagSet:
        return self.debug if debuggable else self.release

    def variants(self) -> List[BuildVariant]:
        """Enumerates the application variants.

        Variants are the cross product of product flavors and build types,
        named like the Android Gradle plugin names them (freeDebug with the
        directory name free/debug).

        Raises:
            ConfigurationError: Two combinations produce the same name.
        """
        if not self.build_types:
            raise ConfigurationError('At least one build type is required')

        flavors: Tuple[Optional[str], ...] = self.product_flavors or (None, )
        variants = []
        seen: Set[str] = set()
        for flavor in flavors:
            for build_type in self.build_types:
                if flavor is None:
                    name = build_type.name
                    dir_name = build_type.name
                else:
                    name = flavor + capitalize(build_type.name)
                    dir_name = f'{flavor}/{build_type.name}'
                if name in seen:
                    raise ConfigurationError(f'Duplicate variant {name}')
                seen.add(name)
                flags = self.flags_for(build_type.debuggable)
                variants.append(
                    BuildVariant(name=name,
                                 dir_name=dir_name,
                                 debuggable=build_type.debuggable,
                                 extra_build_flags=flags.extra_build_flags,
                                 extra_install_flags=flags.extra_install_flags))
        return variants

    def host_task_names(self) -> FrozenSet[str]:
        """Returns the names of the tasks the Android build defines."""
        if self.host_tasks is not None:
            return self.host_tasks
        names = {'clean'}
        for variant in self.variants():
            suffix = variant.task_suffix
            names.add(f'compile{suffix}JavaWithJavac')
            names.add(f'compile{suffix}Sources')
            if self.ndk_compile:
                names.add(f'compile{suffix}Ndk')
            if self.external_native_build:
                names.add(f'externalNativeBuild{suffix}')
        return frozenset(names)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ProjectConfig:
        """Creates a ProjectConfig from parsed JSON.

        Raises:
            ConfigurationError: The data contains unknown keys or values of
                the wrong type.
        """
        if not isinstance(data, dict):
            raise ConfigurationError('Configuration must be a JSON object')
        unknown = set(data) - _KNOWN_KEYS
        if unknown:
            raise ConfigurationError('Unknown configuration keys: {}'.format(
                ', '.join(sorted(unknown))))

        kwargs: Dict[str, Any] = {}
        if 'tools_version' in data:
            kwargs['tools_version'] = _get_str(data, 'tools_version')
        for key in ('use_kapt', 'use_package_clean', 'clean_enabled',
                    'ndk_compile', 'external_native_build'):
            if key in data:
                kwargs[key] = _get_bool(data, key)
        for key in ('debug', 'release'):
            if key in data:
                kwargs[key] = _parse_flag_set(key, data[key])
        if 'build_types' in data:
            kwargs['build_types'] = _parse_build_types(data['build_types'])
        if 'product_flavors' in data:
            kwargs['product_flavors'] = _get_str_tuple(data, 'product_flavors')
        if data.get('host_tasks') is not None:
            kwargs['host_tasks'] = frozenset(_get_str_tuple(data, 'host_tasks'))
        return cls(**kwargs)

    @classmethod
    def load(cls, path: Path) -> ProjectConfig:
        """Loads the configuration file, or the defaults if it is missing."""
        if not path.exists():
            logger().debug('%s not found. Using default configuration', path)
            return cls()
        try:
            with open(path) as config_file:
                data = json.load(config_file)
        except json.JSONDecodeError as ex:
            raise ConfigurationError(f'{path}: {ex}') from ex
        return cls.from_dict(data)


_KNOWN_KEYS = frozenset({
    'tools_version',
    'use_kapt',
    'use_package_clean',
    'clean_enabled',
    'debug',
    'release',
    'build_types',
    'product_flavors',
    'ndk_compile',
    'external_native_build',
    'host_tasks',
})


def _get_bool(data: Dict[str, Any], key: str) -> bool:
    value = data[key]
    if not isinstance(value, bool):
        raise ConfigurationError(f'{key} must be a boolean, got {value!r}')
    return value


def _get_str(data: Dict[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str) or not value:
        raise ConfigurationError(
            f'{key} must be a non-empty string, got {value!r}')
    return value


def _get_str_tuple(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    value = data[key]
    if not isinstance(value, list) or not all(
            isinstance(v, str) for v in value):
        raise ConfigurationError(
            f'{key} must be a list of strings, got {value!r}')
    return tuple(value)


def _parse_flag_set(name: str, data: Any) -> FlagSet:
    if not isinstance(data, dict):
        raise ConfigurationError(f'{name} must be an object, got {data!r}')
    unknown = set(data) - {'extra_build_flags', 'extra_install_flags'}
    if unknown:
        raise ConfigurationError('Unknown keys in {}: {}'.format(
            name, ', '.join(sorted(unknown))))
    kwargs = {}
    for key in ('extra_build_flags', 'extra_install_flags'):
        if key in data:
            kwargs[key] = _get_str_tuple(data, key)
    return FlagSet(**kwargs)


def _parse_build_types(data: Any) -> Tuple[BuildType, ...]:
    if not isinstance(data, dict):
        raise ConfigurationError(
            f'build_types must be an object, got {data!r}')
    build_types = []
    for name, props in data.items():
        if not isinstance(props, dict) or 'debuggable' not in props:
            raise ConfigurationError(
                f'Build type {name} must declare "debuggable"')
        build_types.append(
            BuildType(name, _get_bool(props, 'debuggable')))
    return tuple(build_types)
