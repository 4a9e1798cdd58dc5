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
"""Performs dependency tracking for task execution."""
from __future__ import annotations

from typing import Dict, List, Sequence, Set

from swiftandroid.graph import TaskNode, prove_acyclic


class DependencyManager:
    """Tracks task dependencies.

    The DependencyManager computes task ordering based on the dependency graph
    and exposes DependencyManager.get_ready() as the set of tasks that are no
    longer waiting on their dependencies. This is updated whenever the
    DependencyManager is informed of a task being completed via
    DependencyManager.complete().
    """

    def __init__(self, all_tasks: Sequence[TaskNode]) -> None:
        """Initializes a DependencyManager.

        Raises:
            ValueError: all_tasks is empty or a dependency is not one of
                all_tasks.
            CyclicDependencyError: The tasks contain a dependency cycle.
        """
        if not all_tasks:
            raise ValueError('No tasks to run')
        names = {t.name for t in all_tasks}
        for task in all_tasks:
            missing = task.deps - names
            if missing:
                raise ValueError(
                    '{} depends on tasks that will not run: {}'.format(
                        task.name, ', '.join(sorted(missing))))
        prove_acyclic(all_tasks)

        self.ready_tasks: Set[TaskNode] = {t for t in all_tasks if not t.deps}

        # The values of this map are the tasks that the key is still waiting
        # for. When a task is complete, it is removed from all values in this
        # dict. An empty value indicates that the task is now ready.
        self.blocked_tasks: Dict[TaskNode, Set[str]] = {
            t: set(t.deps) for t in all_tasks if t.deps
        }

        # Reverse map from a task to all of its dependents.
        self.deps_to_tasks: Dict[str, List[TaskNode]] = {
            t.name: [] for t in all_tasks
        }
        for task in all_tasks:
            for dep in task.deps:
                self.deps_to_tasks[dep].append(task)

    def get_ready(self) -> Set[TaskNode]:
        """Returns a set of tasks that are ready to run.

        Retrieving the set removes the tasks from ready_tasks, since the caller
        is assumed to start them.
        """
        ready = self.ready_tasks
        self.ready_tasks = set()
        return ready

    def complete(self, task: TaskNode) -> None:
        """Signals that the given task has completed successfully.

        Args:
            task: The task that has finished.

        Raises:
            KeyError: The task is not tracked by this DependencyManager.
        """
        for dependent in self.deps_to_tasks[task.name]:
            self.blocked_tasks[dependent].remove(task.name)
            if self.blocked_tasks[dependent]:
                # Still blocked on other dependencies.
                continue
            del self.blocked_tasks[dependent]
            self.ready_tasks.add(dependent)

    @property
    def finished(self) -> bool:
        return not self.ready_tasks and not self.blocked_tasks
