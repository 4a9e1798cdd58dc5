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
"""Tests for swiftandroid.executor."""
import itertools
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from swiftandroid.config import ProjectConfig
from swiftandroid.errors import (
    ConfigurationError,
    ExternalProcessFailure,
    NdkUnresolvedError,
    ToolchainUnresolvedError,
)
from swiftandroid.executor import Outcome, delete_directory
from swiftandroid.plugin import SwiftAndroidProject, configure
from swiftandroid import properties
from swiftandroid.runner import ExternalProcessRunner


# Every build writes its outputs later than the last one, and later than
# the sources.
_OUTPUT_MTIMES = itertools.count(2000)


class FakeRunner(ExternalProcessRunner):
    """Records commands instead of running them.

    Running swift-build writes a library to the debug output directory, and
    commands named in fail_on exit with status 1.
    """

    def __init__(self, project_dir: Path, fail_on: Sequence[str] = ()) -> None:
        super().__init__({})
        self.project_dir = project_dir
        self.fail_on = fail_on
        self.calls: List[Tuple[str, ...]] = []
        self.envs: List[Dict[str, str]] = []

    def run(self,
            cmd: Sequence[str],
            cwd: Optional[Path] = None,
            additional_env: Optional[Mapping[str, str]] = None) -> None:
        self.calls.append(tuple(cmd))
        self.envs.append(dict(additional_env or {}))
        tool = Path(cmd[0]).name
        if tool in self.fail_on:
            raise ExternalProcessFailure(cmd, 1, cwd)
        if tool == 'swift-build':
            out = self.project_dir / 'src/main/swift/.build/debug'
            out.mkdir(parents=True, exist_ok=True)
            write(out / 'libApp.so', 'app', mtime=next(_OUTPUT_MTIMES))

    def tools(self) -> List[str]:
        return [Path(c[0]).name for c in self.calls]


def write(path: Path, text: str = '', mtime: Optional[int] = None) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    if mtime is not None:
        os.utime(path, (mtime, mtime))


@pytest.fixture(name='toolchain_dir')
def toolchain_dir_fixture(tmp_path: Path) -> Path:
    toolchain_dir = tmp_path / 'toolchain'
    write(toolchain_dir / 'toolchain/usr/lib/swift/android/libswiftCore.so',
          'core')
    return toolchain_dir


@pytest.fixture(name='project')
def project_fixture(tmp_path: Path, toolchain_dir: Path) -> SwiftAndroidProject:
    project_dir = tmp_path / 'app'
    write(project_dir / 'src/main/swift/Package.swift', mtime=1000)
    write(project_dir / 'src/main/swift/Sources/App/main.swift', mtime=1000)
    return configure(project_dir, {
        'SWIFT_ANDROID_HOME': str(toolchain_dir),
        'ANDROID_NDK_HOME': str(tmp_path / 'ndk'),
    })


def test_variant_chain(project: SwiftAndroidProject) -> None:
    runner = FakeRunner(project.layout.project_dir)
    outcomes = project.executor(runner).execute(['compileDebugSources'])

    assert runner.tools() == ['swift-android', 'swift-build', 'swift-install']
    assert runner.calls[0][1:] == ('tools', '--install', '1.9.6-swift5')
    assert runner.calls[1][1:] == ('--configuration', 'debug')
    assert set(runner.envs[1]) == {'SWIFT_ANDROID_HOME', 'ANDROID_NDK_HOME'}
    assert set(runner.envs[2]) == {'SWIFT_ANDROID_HOME'}

    assert list(outcomes) == [
        'compileDebugJavaWithJavac',
        'installSwiftTools',
        'swiftLinkGeneratedSourcesDebug',
        'swiftBuildDebug',
        'swiftInstallDebug',
        'copySwiftDebug',
        'compileDebugSources',
    ]
    assert outcomes['compileDebugJavaWithJavac'] is Outcome.HOST
    assert outcomes['compileDebugSources'] is Outcome.HOST
    assert outcomes['swiftBuildDebug'] is Outcome.EXECUTED

    jni_libs = project.layout.jni_libs_dir
    assert sorted(p.name for p in jni_libs.iterdir()) == [
        'libApp.so', 'libswiftCore.so'
    ]
    assert project.layout.generated_link.is_symlink()


def test_up_to_date_build_still_copies(project: SwiftAndroidProject) -> None:
    runner = FakeRunner(project.layout.project_dir)
    project.executor(runner).execute(['copySwiftDebug'])
    (project.layout.jni_libs_dir / 'libApp.so').unlink()

    runner = FakeRunner(project.layout.project_dir)
    outcomes = project.executor(runner).execute(['copySwiftDebug'])

    assert outcomes['swiftBuildDebug'] is Outcome.UP_TO_DATE
    assert outcomes['copySwiftDebug'] is Outcome.EXECUTED
    assert runner.tools() == ['swift-android', 'swift-install']
    assert (project.layout.jni_libs_dir / 'libApp.so').exists()


def test_no_sources(tmp_path: Path, toolchain_dir: Path) -> None:
    project = configure(tmp_path / 'app', {
        'SWIFT_ANDROID_HOME': str(toolchain_dir),
        'ANDROID_NDK_HOME': '/opt/ndk',
    })
    runner = FakeRunner(project.layout.project_dir)
    outcomes = project.executor(runner).execute(['swiftBuildDebug'])
    assert outcomes['swiftBuildDebug'] is Outcome.NO_SOURCE
    assert 'swift-build' not in runner.tools()


def test_failure_aborts_dependents(project: SwiftAndroidProject) -> None:
    runner = FakeRunner(project.layout.project_dir, fail_on=['swift-build'])
    with pytest.raises(ExternalProcessFailure):
        project.executor(runner).execute(['copySwiftDebug'])
    assert 'swift-install' not in runner.tools()
    assert not project.layout.jni_libs_dir.exists()


def test_unresolved_toolchain(tmp_path: Path) -> None:
    project = configure(tmp_path / 'app', {})
    runner = FakeRunner(project.layout.project_dir)
    with pytest.raises(ToolchainUnresolvedError) as excinfo:
        project.executor(runner).execute(['copySwiftDebug'])
    assert 'SWIFT_ANDROID_HOME' in str(excinfo.value)
    assert runner.calls == []


def test_unresolved_ndk(tmp_path: Path, toolchain_dir: Path) -> None:
    project = configure(tmp_path / 'app',
                        {'SWIFT_ANDROID_HOME': str(toolchain_dir)})
    runner = FakeRunner(project.layout.project_dir)
    with pytest.raises(NdkUnresolvedError):
        project.executor(runner).execute(['swiftBuildDebug'])
    assert runner.calls == []
    assert not project.layout.generated_link.is_symlink()


def test_unresolved_toolchain_reported_before_ndk(tmp_path: Path) -> None:
    project = configure(tmp_path / 'app', {})
    with pytest.raises(ToolchainUnresolvedError):
        project.executor(FakeRunner(tmp_path)).execute(['swiftBuildDebug'])


def test_flavors_share_build_output(tmp_path: Path,
                                    toolchain_dir: Path) -> None:
    project_dir = tmp_path / 'app'
    write(project_dir / 'src/main/swift/Package.swift', mtime=1000)
    project = configure(project_dir, {
        'SWIFT_ANDROID_HOME': str(toolchain_dir),
        'ANDROID_NDK_HOME': str(tmp_path / 'ndk'),
    }, ProjectConfig(product_flavors=('free', 'paid')))

    def build(variant: str) -> Outcome:
        runner = FakeRunner(project_dir)
        outcomes = project.executor(runner).execute([f'copySwift{variant}'])
        return outcomes[f'swiftBuild{variant}']

    assert build('FreeDebug') is Outcome.EXECUTED
    # The debug outputs now belong to free.
    assert build('PaidDebug') is Outcome.EXECUTED
    assert build('FreeDebug') is Outcome.EXECUTED
    assert build('FreeDebug') is Outcome.UP_TO_DATE
    assert build('PaidDebug') is Outcome.EXECUTED


def test_clean_without_toolchain(tmp_path: Path) -> None:
    project = configure(tmp_path / 'app', {})
    write(project.layout.swift_build_dir / 'debug/libApp.so')
    outcomes = project.executor(FakeRunner(tmp_path)).execute(['clean'])
    assert outcomes['swiftForceClean'] is Outcome.EXECUTED
    assert not project.layout.swift_build_dir.exists()
    assert project.layout.swift_dir.exists()


def test_update_properties(tmp_path: Path) -> None:
    project = configure(tmp_path / 'app', {
        'SWIFT_ANDROID_HOME': '/opt/toolchain',
        'ANDROID_NDK_HOME': '/opt/ndk',
    })
    project.executor(FakeRunner(tmp_path)).execute(
        ['swiftUpdateLocalProperties'])
    assert properties.load(project.layout.local_properties) == {
        'swift-android.dir': '/opt/toolchain',
        'ndk.dir': '/opt/ndk',
    }


def test_unknown_task(project: SwiftAndroidProject) -> None:
    with pytest.raises(ConfigurationError, match='swiftBuildStaging'):
        project.executor(FakeRunner(Path('.'))).execute(['swiftBuildStaging'])


def test_delete_missing_directory(tmp_path: Path) -> None:
    delete_directory(tmp_path / 'missing')
