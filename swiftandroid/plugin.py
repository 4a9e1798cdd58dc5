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
"""Configures the Swift build of an Android application module."""
from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from swiftandroid.config import BuildVariant, ProjectConfig
from swiftandroid.executor import TaskExecutor
from swiftandroid.graph import TaskGraph
from swiftandroid.paths import ProjectLayout
from swiftandroid.runner import ExternalProcessRunner
from swiftandroid.tasks import TaskGraphBuilder
from swiftandroid.toolchains import ToolchainConfig
import swiftandroid.toolchains


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


@dataclass(frozen=True)
class SwiftAndroidProject:
    """A fully configured module: its settings, toolchain and task graph."""

    layout: ProjectLayout
    config: ProjectConfig
    toolchain: ToolchainConfig
    variants: List[BuildVariant]
    builder: TaskGraphBuilder
    graph: TaskGraph

    def executor(self,
                 runner: Optional[ExternalProcessRunner] = None
                 ) -> TaskExecutor:
        return TaskExecutor(self.graph, self.toolchain, self.layout, runner)


def configure(project_dir: Path,
              environ: Optional[Mapping[str, str]] = None,
              config: Optional[ProjectConfig] = None) -> SwiftAndroidProject:
    """Configures the Swift build for the module in project_dir.

    The toolchain is resolved and the variants are enumerated before any task
    is created. The task graph is then materialized in one step.

    Args:
        project_dir: The Android application module directory.
        environ: Environment used to resolve locations. Defaults to
            os.environ.
        config: Project configuration. Loaded from swift-android.json in
            project_dir if not given.

    Raises:
        ConfigurationError: The configuration is invalid or the Android build
            lacks a task the Swift build attaches to.
    """
    layout = ProjectLayout(project_dir)
    if config is None:
        config = ProjectConfig.load(layout.config_file)
    toolchain = swiftandroid.toolchains.resolve_from_file(
        layout.local_properties,
        os.environ if environ is None else environ,
        config.tools_version)
    if not toolchain.is_toolchain_present():
        logger().info('Swift toolchain location is not configured')
    if not toolchain.is_ndk_present():
        logger().info('NDK location is not configured')

    variants = config.variants()
    builder = TaskGraphBuilder(layout, toolchain, config,
                               config.host_task_names())
    for variant in variants:
        builder.add_variant(variant)
    graph = builder.materialize()
    return SwiftAndroidProject(layout, config, toolchain, variants, builder,
                               graph)
