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
"""Android build tasks that the Swift tasks attach to."""
from __future__ import annotations

import enum
from typing import AbstractSet, Optional

from swiftandroid.config import BuildVariant


@enum.unique
class CompileHook(enum.Enum):
    """Android tasks that must run after the Swift libraries are copied.

    Members are declared in order of preference.
    """

    NDK_COMPILE = 'compile{}Ndk'
    EXTERNAL_NATIVE_BUILD = 'externalNativeBuild{}'
    COMPILE_SOURCES = 'compile{}Sources'

    def task_name(self, variant: BuildVariant) -> str:
        return self.value.format(variant.task_suffix)


def annotation_processor_task(variant: BuildVariant) -> str:
    """Returns the task that generates the Swift bridging sources."""
    return f'compile{variant.task_suffix}JavaWithJavac'


def select_compile_hook(variant: BuildVariant,
                        host_tasks: AbstractSet[str]) -> Optional[CompileHook]:
    """Returns the first CompileHook whose task exists for variant.

    Args:
        variant: The variant being configured.
        host_tasks: Names of all tasks defined by the Android build.

    Returns:
        The preferred hook, or None if the Android build defines none of them.
    """
    for hook in CompileHook:
        if hook.task_name(variant) in host_tasks:
            return hook
    return None
