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
"""Task graph classes and functions.

A TaskNode only describes work: what to run, where, and which files it reads
and writes. Nothing in this module touches the filesystem or launches
processes, so graphs can be built and validated in tests without side effects.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import enum
from pathlib import Path
from typing import (
    AbstractSet,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
)

from swiftandroid.errors import ConfigurationError, CyclicDependencyError
from swiftandroid.install import ArtifactCopySpec
from swiftandroid.link import GeneratedSourceLink
from swiftandroid.paths import FileSet
from swiftandroid.toolchains import Requirement


@enum.unique
class TaskKind(enum.Enum):
    """What executing a task does."""

    # Runs TaskNode.command.
    EXEC = 'exec'
    # Copies libraries as described by TaskNode.copy_spec.
    COPY = 'copy'
    # Recreates TaskNode.link.
    LINK = 'link'
    # Deletes TaskNode.delete_dir.
    DELETE = 'delete'
    # Writes resolved toolchain locations to local.properties.
    UPDATE_PROPERTIES = 'update-properties'
    # Does nothing itself; only groups its dependencies.
    GROUP = 'group'
    # A task of the Android build. Executed by Gradle, not by us.
    HOST = 'host'


@dataclass(frozen=True, eq=False)
class TaskNode:
    """A single step of the build."""

    name: str
    kind: TaskKind
    description: str = ''
    deps: FrozenSet[str] = frozenset()
    requires: FrozenSet[Requirement] = frozenset()
    working_dir: Optional[Path] = None
    command: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    # Declared inputs and outputs. Only incremental tasks are checked against
    # them before running.
    inputs: Tuple[FileSet, ...] = ()
    outputs: Tuple[FileSet, ...] = ()
    incremental: bool = False
    copy_spec: Optional[ArtifactCopySpec] = None
    link: Optional[GeneratedSourceLink] = None
    delete_dir: Optional[Path] = None

    def input_files(self) -> List[Path]:
        return sorted({p for s in self.inputs for p in s.files()})

    def output_files(self) -> List[Path]:
        return sorted({p for s in self.outputs for p in s.files()})

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f'TaskNode({self.name})'

    # Names are unique within a graph.
    def __hash__(self) -> int:
        return hash(self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TaskNode):
            return NotImplemented
        return self.name == other.name


def find_cycle(deps: Mapping[str, Iterable[str]]) -> Optional[List[str]]:
    """Finds a cycle in a dependency mapping if there is one.

    Args:
        deps: Maps each node name to the names it has an edge to.

    Returns:
        A list of names that make up a cycle or None if no cycle exists.
        The list will begin and end with the same name, i.e. [A, B, A].
    """
    visited: Set[str] = set()
    for name in sorted(deps):
        cycle = _find_cycle_from_node(name, deps, visited, [])
        if cycle is not None:
            return cycle
    return None


def _find_cycle_from_node(name: str, deps: Mapping[str, Iterable[str]],
                          visited: Set[str],
                          path: List[str]) -> Optional[List[str]]:
    """Performs a recursive depth-first search for a cycle.

    The search does not backtrack to find cycles prior to the given node, so
    callers should start from every node (visited short circuits the repeated
    work).
    """
    path.append(name)
    if name in path[:-1]:
        return path[path.index(name):]

    if name in visited:
        path.pop()
        return None

    visited.add(name)
    for out in sorted(deps.get(name, ())):
        cycle = _find_cycle_from_node(out, deps, visited, path)
        if cycle is not None:
            return cycle
    path.pop()
    return None


def prove_acyclic(nodes: Iterable[TaskNode]) -> None:
    """Proves that the nodes form an acyclic graph or raises an error.

    Raises:
        CyclicDependencyError: A cycle was found.
    """
    cycle = find_cycle({n.name: n.deps for n in nodes})
    if cycle is not None:
        raise CyclicDependencyError(cycle)


class TaskGraph:
    """A directed acyclic graph of TaskNodes.

    Nodes can only be added after all of their dependencies, which makes
    cycles impossible by construction.
    """

    def __init__(self, nodes: Iterable[TaskNode] = ()) -> None:
        self._nodes: Dict[str, TaskNode] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: TaskNode) -> TaskNode:
        """Adds a node to the graph.

        Raises:
            ConfigurationError: The name is already used or a dependency is not
                part of the graph.
        """
        if node.name in self._nodes:
            raise ConfigurationError(f'Duplicate task {node.name}')
        missing = node.deps - self._nodes.keys()
        if missing:
            raise ConfigurationError('{} depends on unknown tasks: {}'.format(
                node.name, ', '.join(sorted(missing))))
        self._nodes[node.name] = node
        return node

    def __getitem__(self, name: str) -> TaskNode:
        return self._nodes[name]

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[TaskNode]:
        for name in sorted(self._nodes):
            yield self._nodes[name]

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def names(self) -> FrozenSet[str]:
        return frozenset(self._nodes)

    def dependents_of(self, name: str) -> Set[str]:
        """Returns the names of nodes with a direct edge to name."""
        return {n.name for n in self._nodes.values() if name in n.deps}

    def transitive_deps(self, names: AbstractSet[str]) -> Set[str]:
        """Returns names and every node they depend on, directly or not.

        Raises:
            KeyError: A name is not part of the graph.
        """
        result: Set[str] = set()
        pending = list(names)
        while pending:
            name = pending.pop()
            if name in result:
                continue
            result.add(name)
            pending.extend(self._nodes[name].deps)
        return result

    def subgraph(self, names: AbstractSet[str]) -> List[TaskNode]:
        """Returns the nodes needed to run the given targets."""
        return [self._nodes[n] for n in sorted(self.transitive_deps(names))]
