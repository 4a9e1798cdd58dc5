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
"""Executes tasks of a TaskGraph.

Every variant shares the Swift package directory and its .build directory, so
tasks run one at a time in dependency order. Among tasks that are ready at the
same time, the order is alphabetical to keep runs reproducible.
"""
from __future__ import annotations

import enum
import logging
from pathlib import Path
import shutil
from typing import Dict, Iterable, Optional

from swiftandroid.deps import DependencyManager
from swiftandroid.errors import ConfigurationError, FilesystemError
from swiftandroid.gate import GateDecision, IncrementalGate
from swiftandroid.graph import TaskGraph, TaskKind, TaskNode
from swiftandroid.install import install_artifacts
from swiftandroid.link import link_generated_sources
from swiftandroid.paths import ProjectLayout
from swiftandroid.runner import ExternalProcessRunner
from swiftandroid.toolchains import ToolchainConfig
import swiftandroid.toolchains


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


@enum.unique
class Outcome(enum.Enum):
    """What happened to a task during execution."""

    EXECUTED = 'executed'
    UP_TO_DATE = 'up-to-date'
    NO_SOURCE = 'no-source'
    # Belongs to the Android build and was not run.
    HOST = 'host'


def delete_directory(path: Path) -> None:
    """Deletes a directory tree. A missing directory is not an error."""
    if not path.exists() and not path.is_symlink():
        return
    logger().info('Deleting %s', path)
    try:
        if path.is_symlink() or not path.is_dir():
            path.unlink()
        else:
            shutil.rmtree(path)
    except OSError as ex:
        raise FilesystemError(path, str(ex)) from ex


class TaskExecutor:
    """Runs tasks and their dependencies."""

    def __init__(self,
                 graph: TaskGraph,
                 toolchain: ToolchainConfig,
                 layout: ProjectLayout,
                 runner: Optional[ExternalProcessRunner] = None,
                 gate: Optional[IncrementalGate] = None) -> None:
        self.graph = graph
        self.toolchain = toolchain
        self.layout = layout
        self.runner = runner if runner is not None else ExternalProcessRunner()
        self.gate = gate if gate is not None else IncrementalGate(
            layout.state_dir)

    def execute(self, targets: Iterable[str]) -> Dict[str, Outcome]:
        """Runs the given tasks after all of their dependencies.

        Execution stops at the first failure. The exception propagates and no
        dependent task runs.

        Returns:
            The outcome of every task that was considered, keyed by name.

        Raises:
            ConfigurationError: A target is not a known task.
            ToolchainUnresolvedError: A task to run needs the toolchain.
            NdkUnresolvedError: A task to run needs the NDK.
        """
        targets = set(targets)
        unknown = targets - self.graph.names
        if unknown:
            raise ConfigurationError('Unknown tasks: {}'.format(', '.join(
                sorted(unknown))))

        nodes = self.graph.subgraph(targets)
        # Every location the run needs is checked before the first task
        # starts. The toolchain is reported before the NDK.
        self.toolchain.require(
            frozenset().union(*(n.requires for n in nodes
                                if n.kind is not TaskKind.HOST)))

        deps = DependencyManager(nodes)
        outcomes: Dict[str, Outcome] = {}
        while deps.ready_tasks:
            for task in sorted(deps.get_ready(), key=lambda t: t.name):
                outcomes[task.name] = self.run_task(task)
                deps.complete(task)

        if not deps.finished:
            raise RuntimeError(
                'Executor stopped early. Tasks are still blocked: {}'.format(
                    ', '.join(sorted(t.name for t in deps.blocked_tasks))))
        return outcomes

    def run_task(self, task: TaskNode) -> Outcome:
        """Runs a single task. Its dependencies must already have run."""
        if task.kind is TaskKind.HOST:
            logger().debug('%s is run by the Android build', task.name)
            return Outcome.HOST

        logger().info('> Task :%s', task.name)
        # Fail before any side effect if a location is missing.
        self.toolchain.require(task.requires)

        if task.kind is TaskKind.EXEC:
            return self._run_exec(task)
        if task.kind is TaskKind.COPY:
            assert task.copy_spec is not None
            install_artifacts(task.copy_spec)
        elif task.kind is TaskKind.LINK:
            assert task.link is not None
            link_generated_sources(task.link)
        elif task.kind is TaskKind.DELETE:
            assert task.delete_dir is not None
            delete_directory(task.delete_dir)
        elif task.kind is TaskKind.UPDATE_PROPERTIES:
            swiftandroid.toolchains.update_properties(
                self.toolchain, self.layout.local_properties)
        elif task.kind is TaskKind.GROUP:
            pass
        else:
            raise NotImplementedError(f'{task.name}: unhandled {task.kind}')
        return Outcome.EXECUTED

    def _run_exec(self, task: TaskNode) -> Outcome:
        if task.incremental:
            decision = self.gate.check(task)
            if decision is GateDecision.NO_SOURCE:
                return Outcome.NO_SOURCE
            if decision is GateDecision.UP_TO_DATE:
                return Outcome.UP_TO_DATE
        if task.description:
            logger().info('%s', task.description)
        self.runner.run(task.command, task.working_dir, task.env)
        if task.incremental:
            self.gate.record(task)
        return Outcome.EXECUTED
