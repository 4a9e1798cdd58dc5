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
"""Defines the tasks of the Swift build.

Each application variant gets its own chain of tasks:

    installSwiftTools
      -> swiftLinkGeneratedSources<Variant>
      -> swiftBuild<Variant>
      -> swiftInstall<Variant>
      -> copySwift<Variant>

The chain starts after the Android annotation processor has generated the
Swift bridging sources and finishes before the variant's native (or, without
native code, Java) compilation.

Graph construction happens in two phases. Variants are registered first with
TaskGraphBuilder.add_variant(), and the graph is only built by
TaskGraphBuilder.materialize() once every variant is known.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import AbstractSet, Dict, List, Optional, Tuple

from swiftandroid.config import BuildVariant, ProjectConfig
from swiftandroid.errors import ConfigurationError
from swiftandroid.graph import TaskGraph, TaskKind, TaskNode
from swiftandroid.hooks import (
    annotation_processor_task,
    CompileHook,
    select_compile_hook,
)
from swiftandroid.install import ArtifactCopySpec
from swiftandroid.link import GeneratedSourceLink
from swiftandroid.paths import (
    FileSet,
    LIBRARY_PATTERN,
    ProjectLayout,
    SOURCE_PATTERNS,
)
from swiftandroid.toolchains import Requirement, ToolchainConfig


INSTALL_TOOLS_TASK = 'installSwiftTools'
UPDATE_PROPERTIES_TASK = 'swiftUpdateLocalProperties'
PACKAGE_UPDATE_TASK = 'swiftPackageUpdate'
FORCE_CLEAN_TASK = 'swiftForceClean'
PACKAGE_CLEAN_TASK = 'swiftPackageClean'
CLEAN_TASK = 'swiftClean'
HOST_CLEAN_TASK = 'clean'


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantTasks:
    """Names of the tasks created for one variant."""

    link: str
    build: str
    install: str
    copy: str
    annotation_processor: str
    compile_hook: str

    @classmethod
    def for_variant(cls, variant: BuildVariant,
                    compile_hook: str) -> VariantTasks:
        suffix = variant.task_suffix
        return cls(link=f'swiftLinkGeneratedSources{suffix}',
                   build=f'swiftBuild{suffix}',
                   install=f'swiftInstall{suffix}',
                   copy=f'copySwift{suffix}',
                   annotation_processor=annotation_processor_task(variant),
                   compile_hook=compile_hook)


def _executable(path: Optional[Path], name: str) -> str:
    # An unresolved toolchain leaves the bare name in the command. The task
    # requires the toolchain, so the command never runs in that state.
    return str(path) if path is not None else name


class TaskGraphBuilder:
    """Builds the TaskGraph for a project."""

    def __init__(self, layout: ProjectLayout, toolchain: ToolchainConfig,
                 config: ProjectConfig, host_tasks: AbstractSet[str]) -> None:
        """Initializes a TaskGraphBuilder.

        Args:
            layout: Paths of the Android module.
            toolchain: Resolved toolchain locations.
            config: Project configuration.
            host_tasks: Names of the tasks defined by the Android build.
        """
        self.layout = layout
        self.toolchain = toolchain
        self.config = config
        self.host_tasks = frozenset(host_tasks)
        self.variants: List[BuildVariant] = []
        self.variant_tasks: Dict[str, VariantTasks] = {}
        self._graph: Optional[TaskGraph] = None

    def add_variant(self, variant: BuildVariant) -> None:
        """Registers a variant to be included in the graph.

        Raises:
            RuntimeError: The graph has already been materialized.
            ConfigurationError: A variant with the same name was registered.
        """
        if self._graph is not None:
            raise RuntimeError(
                f'Cannot add variant {variant.name} after materialize()')
        if any(v.name == variant.name for v in self.variants):
            raise ConfigurationError(f'Duplicate variant {variant.name}')
        self.variants.append(variant)

    def materialize(self) -> TaskGraph:
        """Builds the task graph for all registered variants.

        The graph is built once. Later calls return the same graph.

        Raises:
            ConfigurationError: The Android build is missing a task the Swift
                build needs to attach to.
        """
        if self._graph is not None:
            return self._graph

        graph = TaskGraph()
        graph.add(self.update_properties_task())
        install_tools = graph.add(self.install_tools_task())
        graph.add(self.package_update_task())
        self.add_clean_tasks(graph)
        for variant in self.variants:
            self.add_variant_tasks(graph, variant, install_tools)
        logger().debug('Created %d tasks for %d variants', len(graph),
                       len(self.variants))
        self._graph = graph
        return graph

    # Variant independent tasks.
    def update_properties_task(self) -> TaskNode:
        return TaskNode(
            name=UPDATE_PROPERTIES_TASK,
            kind=TaskKind.UPDATE_PROPERTIES,
            description='Writes the toolchain and NDK locations to '
            'local.properties.')

    def install_tools_task(self) -> TaskNode:
        version = self.toolchain.tools_version
        return TaskNode(
            name=INSTALL_TOOLS_TASK,
            kind=TaskKind.EXEC,
            description=f'Installs Swift Build Tools v{version}.',
            requires=frozenset({Requirement.TOOLCHAIN}),
            working_dir=self.layout.project_dir,
            command=(_executable(self.toolchain.tools_manager_path,
                                 'swift-android'), 'tools', '--install',
                     version))

    def package_update_task(self) -> TaskNode:
        return TaskNode(name=PACKAGE_UPDATE_TASK,
                        kind=TaskKind.EXEC,
                        description='Updates the Swift package dependencies.',
                        working_dir=self.layout.swift_dir,
                        command=('swift', 'package', 'update'))

    def add_clean_tasks(self, graph: TaskGraph) -> None:
        """Adds both clean strategies and the swiftClean task.

        swiftClean depends on exactly one of the strategies. Both stay
        available to run directly.
        """
        force_clean = graph.add(
            TaskNode(name=FORCE_CLEAN_TASK,
                     kind=TaskKind.DELETE,
                     description='Deletes the SwiftPM build directory.',
                     delete_dir=self.layout.swift_build_dir))
        package_clean = graph.add(
            TaskNode(name=PACKAGE_CLEAN_TASK,
                     kind=TaskKind.EXEC,
                     description='Runs swift package clean.',
                     working_dir=self.layout.swift_dir,
                     command=('swift', 'package', 'clean')))
        if self.config.use_package_clean:
            strategy = package_clean
        else:
            strategy = force_clean
        clean = graph.add(
            TaskNode(name=CLEAN_TASK,
                     kind=TaskKind.GROUP,
                     description='Cleans the Swift build.',
                     deps=frozenset({strategy.name})))

        if self.config.clean_enabled and HOST_CLEAN_TASK in self.host_tasks:
            graph.add(
                TaskNode(name=HOST_CLEAN_TASK,
                         kind=TaskKind.HOST,
                         deps=frozenset({clean.name})))

    # Variant tasks.
    def add_variant_tasks(self, graph: TaskGraph, variant: BuildVariant,
                          install_tools: TaskNode) -> VariantTasks:
        """Adds the task chain for a single variant.

        Raises:
            ConfigurationError: The Android build has no annotation processor
                task or no compile task for the variant.
        """
        hook = select_compile_hook(variant, self.host_tasks)
        if hook is None:
            expected = ', '.join(h.task_name(variant) for h in CompileHook)
            raise ConfigurationError(
                f'Could not find a compile task for variant {variant.name}. '
                f'Expected one of: {expected}')
        names = VariantTasks.for_variant(variant, hook.task_name(variant))
        if names.annotation_processor not in self.host_tasks:
            raise ConfigurationError(
                f'Could not find {names.annotation_processor} for variant '
                f'{variant.name}')

        if names.annotation_processor not in graph:
            graph.add(
                TaskNode(name=names.annotation_processor, kind=TaskKind.HOST))
        link = graph.add(self.link_task(variant, names))
        build = graph.add(self.build_task(variant, names, link, install_tools))
        install = graph.add(
            self.install_task(variant, names, build, install_tools))
        copy = graph.add(
            self.copy_task(variant, names, build, install, install_tools))
        graph.add(
            TaskNode(name=names.compile_hook,
                     kind=TaskKind.HOST,
                     deps=frozenset({copy.name})))
        logger().debug('%s: %s runs after %s', variant.name,
                       names.compile_hook, copy.name)
        self.variant_tasks[variant.name] = names
        return names

    def link_task(self, variant: BuildVariant,
                  names: VariantTasks) -> TaskNode:
        target = self.layout.generated_sources_dir(variant.dir_name,
                                                   self.config.use_kapt)
        return TaskNode(
            name=names.link,
            kind=TaskKind.LINK,
            description='Links generated Swift sources into the package.',
            deps=frozenset({names.annotation_processor}),
            link=GeneratedSourceLink(self.layout.generated_link, target))

    def build_arguments(self, variant: BuildVariant) -> Tuple[str, ...]:
        return ('--configuration',
                variant.configuration) + variant.extra_build_flags

    def install_arguments(self, variant: BuildVariant) -> Tuple[str, ...]:
        return ('--configuration',
                variant.configuration) + variant.extra_install_flags

    def build_task(self, variant: BuildVariant, names: VariantTasks,
                   link: TaskNode, install_tools: TaskNode) -> TaskNode:
        generated = self.layout.generated_sources_dir(variant.dir_name,
                                                      self.config.use_kapt)
        sources = (
            # The generated sources are tracked through their real location
            # rather than the link in .build.
            FileSet(self.layout.swift_dir, SOURCE_PATTERNS,
                    excludes=('.build/**', )),
            FileSet(generated, SOURCE_PATTERNS),
        )
        libraries = FileSet(self.layout.swift_output_dir(variant.debuggable),
                            (LIBRARY_PATTERN, ))
        return TaskNode(
            name=names.build,
            kind=TaskKind.EXEC,
            description=f'Builds the Swift package ({variant.configuration}).',
            deps=frozenset({link.name, install_tools.name}),
            requires=frozenset({Requirement.TOOLCHAIN, Requirement.NDK}),
            working_dir=self.layout.swift_dir,
            command=(_executable(self.toolchain.swift_build_path,
                                 'swift-build'), ) +
            self.build_arguments(variant),
            env=self.toolchain.full_env,
            inputs=sources,
            outputs=(libraries, ),
            incremental=True)

    def install_task(self, variant: BuildVariant, names: VariantTasks,
                     build: TaskNode, install_tools: TaskNode) -> TaskNode:
        return TaskNode(
            name=names.install,
            kind=TaskKind.EXEC,
            description='Installs Swift package libraries for '
            f'{self.layout.abi}.',
            deps=frozenset({install_tools.name, build.name}),
            requires=frozenset({Requirement.TOOLCHAIN}),
            working_dir=self.layout.swift_dir,
            command=(_executable(self.toolchain.swift_install_path,
                                 'swift-install'), ) +
            self.install_arguments(variant),
            env=self.toolchain.swift_env)

    def copy_task(self, variant: BuildVariant, names: VariantTasks,
                  build: TaskNode, install: TaskNode,
                  install_tools: TaskNode) -> TaskNode:
        sources = [FileSet(self.layout.prebuilt_libs_dir, (LIBRARY_PATTERN, ))]
        if self.toolchain.swift_lib_dir is not None:
            sources.append(
                FileSet(self.toolchain.swift_lib_dir, (LIBRARY_PATTERN, )))
        # Outputs of the build come last so they win over stale copies.
        sources.extend(build.outputs)
        return TaskNode(
            name=names.copy,
            kind=TaskKind.COPY,
            description=f'Copies Swift libraries to {self.layout.jni_libs_dir}.',
            deps=frozenset({install_tools.name, build.name, install.name}),
            requires=frozenset({Requirement.TOOLCHAIN}),
            copy_spec=ArtifactCopySpec(tuple(sources),
                                       self.layout.jni_libs_dir))
