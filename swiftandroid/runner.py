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
"""Runs external commands."""
from __future__ import annotations

import logging
import os
from pathlib import Path
import pprint
import shlex
import subprocess
from typing import Dict, Mapping, Optional, Sequence

from swiftandroid.errors import ExternalProcessFailure


def logger() -> logging.Logger:
    """Returns the module logger."""
    return logging.getLogger(__name__)


class ExternalProcessRunner:
    """Runs commands with additional environment variables."""

    def __init__(self, base_env: Optional[Mapping[str, str]] = None) -> None:
        """Initializes an ExternalProcessRunner.

        Args:
            base_env: The environment the additions are merged into. Defaults
                to os.environ at the time each command runs.
        """
        self.base_env = base_env

    def environment(self, additional_env: Mapping[str, str]) -> Dict[str, str]:
        """Returns the environment for a command."""
        env = dict(os.environ if self.base_env is None else self.base_env)
        env.update(additional_env)
        return env

    def run(self,
            cmd: Sequence[str],
            cwd: Optional[Path] = None,
            additional_env: Optional[Mapping[str, str]] = None) -> None:
        """Runs and logs execution of a subprocess.

        Output is not captured, so the toolchain's diagnostics reach the user
        as they are printed.

        Raises:
            ExternalProcessFailure: The command exited with a non-zero status.
        """
        additional_env = additional_env or {}
        pp_cmd = shlex.join(cmd)
        if additional_env:
            pp_env = pprint.pformat(dict(additional_env), indent=4)
            logger().info('Running: %s with env:\n%s', pp_cmd, pp_env)
        else:
            logger().info('Running: %s', pp_cmd)

        try:
            result = subprocess.run(list(cmd),
                                    cwd=cwd,
                                    env=self.environment(additional_env),
                                    check=False)
        except FileNotFoundError as ex:
            # 127 is what a shell reports for a missing command.
            raise ExternalProcessFailure(cmd, 127, cwd) from ex
        if result.returncode != 0:
            raise ExternalProcessFailure(cmd, result.returncode, cwd)
