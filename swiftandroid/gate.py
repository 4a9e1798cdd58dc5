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
"""Decides whether an incremental task needs to run.

SwiftPM has its own incremental build, but starting it (and the toolchain's
wrapper scripts) is slow. A build is skipped when its declared outputs are
newer than all of its declared inputs and neither its command line, the list
of input files nor the outputs changed since the last successful run.

Flavors of the same build type share one SwiftPM output directory, so a task
also runs when its outputs were last written by another task.
"""
from __future__ import annotations

from dataclasses import dataclass
import enum
import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from swiftandroid.errors import FilesystemError
from swiftandroid.graph import TaskNode

# (path, st_mtime_ns, st_size)
OutputEntry = Tuple[str, int, int]


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


@enum.unique
class GateDecision(enum.Enum):
    """The outcome of IncrementalGate.check()."""

    RUN = 'run'
    # The task has no inputs at all, so there is nothing to build.
    NO_SOURCE = 'no-source'
    UP_TO_DATE = 'up-to-date'

    @property
    def should_run(self) -> bool:
        return self is GateDecision.RUN


def snapshot(output_files: List[Path]) -> Tuple[OutputEntry, ...]:
    entries = []
    for path in output_files:
        stat = path.stat()
        entries.append((path.as_posix(), stat.st_mtime_ns, stat.st_size))
    return tuple(entries)


@dataclass(frozen=True)
class Fingerprint:
    """What a task ran with the last time it succeeded, and what it left."""

    command: Tuple[str, ...]
    inputs: Tuple[str, ...]
    outputs: Tuple[OutputEntry, ...]
    output_roots: Tuple[str, ...]

    @classmethod
    def of(cls, node: TaskNode, input_files: List[Path],
           output_files: List[Path]) -> Fingerprint:
        return cls(tuple(node.command),
                   tuple(p.as_posix() for p in input_files),
                   snapshot(output_files),
                   tuple(sorted(s.root.as_posix() for s in node.outputs)))

    def to_json(self) -> str:
        return json.dumps({
            'command': list(self.command),
            'inputs': list(self.inputs),
            'outputs': [list(e) for e in self.outputs],
            'output_roots': list(self.output_roots),
        }, indent=2)

    @classmethod
    def from_json(cls, text: str) -> Fingerprint:
        data = json.loads(text)
        return cls(tuple(data['command']), tuple(data['inputs']),
                   tuple((str(p), int(m), int(s))
                         for p, m, s in data['outputs']),
                   tuple(data['output_roots']))


class IncrementalGate:
    """Checks and records the state of incremental tasks.

    State is kept in one JSON file per task below state_dir.
    """

    def __init__(self, state_dir: Path) -> None:
        self.state_dir = state_dir

    def state_path(self, node: TaskNode) -> Path:
        return self.state_dir / f'{node.name}.json'

    def _read(self, path: Path) -> Optional[Fingerprint]:
        try:
            return Fingerprint.from_json(path.read_text())
        except (OSError, ValueError, KeyError, TypeError) as ex:
            logger().warning('Ignoring unreadable state %s: %s', path, ex)
            return None

    def load(self, node: TaskNode) -> Optional[Fingerprint]:
        """Returns the recorded fingerprint of node, if any.

        Unreadable state is treated like missing state.
        """
        path = self.state_path(node)
        if not path.exists():
            return None
        return self._read(path)

    def shares_outputs_with_other_task(self, node: TaskNode) -> bool:
        """Returns True if another task recorded outputs in node's roots."""
        if not self.state_dir.is_dir():
            return False
        roots = {s.root.as_posix() for s in node.outputs}
        own_path = self.state_path(node)
        for path in sorted(self.state_dir.glob('*.json')):
            if path == own_path:
                continue
            other = self._read(path)
            if other is not None and roots.intersection(other.output_roots):
                logger().debug('%s: outputs are shared with %s', node.name,
                               path.stem)
                return True
        return False

    def check(self, node: TaskNode) -> GateDecision:
        """Decides whether node has to run."""
        input_files = node.input_files()
        if not input_files:
            logger().info('%s: no source files', node.name)
            return GateDecision.NO_SOURCE

        output_files = node.output_files()
        if not output_files:
            logger().debug('%s: no outputs exist', node.name)
            return GateDecision.RUN

        recorded = self.load(node)
        if recorded is None:
            if self.shares_outputs_with_other_task(node):
                return GateDecision.RUN
        elif recorded != Fingerprint.of(node, input_files, output_files):
            logger().debug('%s: command, input files or outputs changed',
                           node.name)
            return GateDecision.RUN

        newest_input = max(p.stat().st_mtime_ns for p in input_files)
        oldest_output = min(p.stat().st_mtime_ns for p in output_files)
        if newest_input > oldest_output:
            logger().debug('%s: inputs are newer than outputs', node.name)
            return GateDecision.RUN

        logger().info('%s: up to date', node.name)
        return GateDecision.UP_TO_DATE

    def record(self, node: TaskNode) -> None:
        """Records the fingerprint of a successful run of node."""
        path = self.state_path(node)
        fingerprint = Fingerprint.of(node, node.input_files(),
                                     node.output_files())
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(fingerprint.to_json())
        except OSError as ex:
            raise FilesystemError(path, str(ex)) from ex

    def invalidate(self, node: TaskNode) -> None:
        """Forgets the recorded state of node so it runs next time."""
        self.state_path(node).unlink(missing_ok=True)
