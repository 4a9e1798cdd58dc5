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
"""Command line entry point.

Run with `swift-android --project-dir app run copySwiftDebug`.
"""
from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import Tuple

import click

from swiftandroid.errors import SwiftAndroidError
from swiftandroid.executor import Outcome
from swiftandroid.graph import TaskKind
from swiftandroid.plugin import SwiftAndroidProject, configure
from swiftandroid.tasks import UPDATE_PROPERTIES_TASK


@click.group()
@click.option(
    "-v",
    "--verbose",
    count=True,
    default=0,
    help="Increase verbosity (repeatable).",
)
@click.option(
    "--project-dir",
    type=click.Path(file_okay=False, exists=True, resolve_path=True,
                    path_type=Path),
    default=".",
    show_default=True,
    help="The Android application module containing src/main/swift.",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, project_dir: Path) -> None:
    """Builds the Swift package of an Android application module."""
    log_levels = [logging.WARNING, logging.INFO, logging.DEBUG]
    logging.basicConfig(level=log_levels[min(verbose, len(log_levels) - 1)])
    try:
        ctx.obj = configure(project_dir)
    except SwiftAndroidError as ex:
        sys.exit(f"error: {ex}")


@main.command()
@click.option("--all", "show_all", is_flag=True,
              help="Also list the Android tasks the Swift tasks attach to.")
@click.pass_obj
def tasks(project: SwiftAndroidProject, show_all: bool) -> None:
    """Lists the tasks and their dependencies."""
    for task in project.graph:
        if task.kind is TaskKind.HOST and not show_all:
            continue
        line = task.name
        if task.description:
            line += f" - {task.description}"
        click.echo(line)
        for dep in sorted(task.deps):
            click.echo(f"    <- {dep}")


@main.command()
@click.argument("task_names", nargs=-1, required=True)
@click.pass_obj
def run(project: SwiftAndroidProject, task_names: Tuple[str, ...]) -> None:
    """Runs TASK_NAMES and everything they depend on."""
    try:
        outcomes = project.executor().execute(task_names)
    except SwiftAndroidError as ex:
        sys.exit(f"error: {ex}")
    for name, outcome in outcomes.items():
        if outcome is not Outcome.EXECUTED:
            click.echo(f"{name}: {outcome.value}")
    click.echo("BUILD SUCCESSFUL")


@main.command("update-properties")
@click.pass_obj
def update_properties(project: SwiftAndroidProject) -> None:
    """Writes the resolved toolchain and NDK locations to local.properties."""
    try:
        project.executor().execute([UPDATE_PROPERTIES_TASK])
    except SwiftAndroidError as ex:
        sys.exit(f"error: {ex}")


if __name__ == "__main__":
    main()  # pylint: disable=no-value-for-parameter
