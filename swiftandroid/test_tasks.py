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
"""Tests for swiftandroid.tasks."""
from pathlib import Path
from typing import Optional
import unittest

from swiftandroid.config import BuildVariant, FlagSet, ProjectConfig
from swiftandroid.errors import ConfigurationError
from swiftandroid.graph import TaskGraph, TaskKind, prove_acyclic
from swiftandroid.hooks import CompileHook, select_compile_hook
from swiftandroid.paths import ProjectLayout
from swiftandroid.tasks import (
    CLEAN_TASK,
    FORCE_CLEAN_TASK,
    INSTALL_TOOLS_TASK,
    PACKAGE_CLEAN_TASK,
    TaskGraphBuilder,
)
from swiftandroid.toolchains import Requirement, ToolchainConfig, resolve

PROJECT_DIR = Path('/app')
TOOLCHAIN = ToolchainConfig(Path('/opt/toolchain'), Path('/opt/ndk'),
                            tools_version='1.9.6-swift5')


def make_graph(config: ProjectConfig,
               toolchain: ToolchainConfig = TOOLCHAIN,
               host_tasks: Optional[frozenset] = None) -> TaskGraph:
    builder = TaskGraphBuilder(
        ProjectLayout(PROJECT_DIR), toolchain, config,
        config.host_task_names() if host_tasks is None else host_tasks)
    for variant in config.variants():
        builder.add_variant(variant)
    return builder.materialize()


class VariantChainTest(unittest.TestCase):
    def setUp(self) -> None:
        self.config = ProjectConfig(
            product_flavors=('free', 'paid'),
            debug=FlagSet(('-Xswiftc', '-DDEBUG'), ('--verbose', )))
        self.graph = make_graph(self.config)

    def test_acyclic(self) -> None:
        prove_acyclic(self.graph)

    def test_deps_added_first(self) -> None:
        # Rebuilding the graph in iteration order fails if a node's
        # dependencies were not added before it.
        order = []
        seen = set()
        pending = list(self.graph)
        while pending:
            ready = [n for n in pending if n.deps <= seen]
            self.assertTrue(ready)
            for node in ready:
                order.append(node)
                seen.add(node.name)
                pending.remove(node)
        self.assertEqual(len(self.graph), len(TaskGraph(order)))

    def test_chain(self) -> None:
        graph = self.graph
        self.assertSetEqual({'compileFreeDebugJavaWithJavac'},
                            set(graph['swiftLinkGeneratedSourcesFreeDebug'].deps))
        self.assertSetEqual(
            {'swiftLinkGeneratedSourcesFreeDebug', INSTALL_TOOLS_TASK},
            set(graph['swiftBuildFreeDebug'].deps))
        self.assertSetEqual({'swiftBuildFreeDebug', INSTALL_TOOLS_TASK},
                            set(graph['swiftInstallFreeDebug'].deps))
        self.assertSetEqual(
            {'swiftBuildFreeDebug', 'swiftInstallFreeDebug', INSTALL_TOOLS_TASK},
            set(graph['copySwiftFreeDebug'].deps))
        self.assertSetEqual({'copySwiftFreeDebug'},
                            set(graph['compileFreeDebugSources'].deps))
        self.assertIs(TaskKind.HOST, graph['compileFreeDebugSources'].kind)

    def test_commands(self) -> None:
        build = self.graph['swiftBuildPaidDebug']
        self.assertEqual((
            '/opt/toolchain/build-tools/1.9.6-swift5/swift-build',
            '--configuration',
            'debug',
            '-Xswiftc',
            '-DDEBUG',
        ), build.command)
        self.assertEqual(PROJECT_DIR / 'src/main/swift', build.working_dir)
        self.assertEqual(TOOLCHAIN.full_env, build.env)
        self.assertTrue(build.incremental)
        self.assertSetEqual({Requirement.TOOLCHAIN, Requirement.NDK},
                            set(build.requires))

        install = self.graph['swiftInstallPaidRelease']
        self.assertEqual((
            '/opt/toolchain/build-tools/1.9.6-swift5/swift-install',
            '--configuration',
            'release',
        ), install.command)
        self.assertEqual(TOOLCHAIN.swift_env, install.env)

        tools = self.graph[INSTALL_TOOLS_TASK]
        self.assertEqual(('/opt/toolchain/bin/swift-android', 'tools',
                          '--install', '1.9.6-swift5'), tools.command)

    def test_link_target(self) -> None:
        link = self.graph['swiftLinkGeneratedSourcesPaidRelease'].link
        assert link is not None
        self.assertEqual(
            PROJECT_DIR / 'src/main/swift/.build/generated', link.link)
        self.assertEqual(
            PROJECT_DIR /
            'build/generated/source/apt/paid/release/SwiftGenerated',
            link.target)

    def test_copy_sources_order(self) -> None:
        spec = self.graph['copySwiftFreeRelease'].copy_spec
        assert spec is not None
        self.assertListEqual([
            PROJECT_DIR / 'src/main/swift/.build/jniLibs/armeabi-v7a',
            Path('/opt/toolchain/toolchain/usr/lib/swift/android'),
            PROJECT_DIR / 'src/main/swift/.build/release',
        ], [s.root for s in spec.sources])
        self.assertEqual(PROJECT_DIR / 'src/main/jniLibs/armeabi-v7a',
                         spec.destination)
        self.assertEqual(0o644, spec.file_mode)

    def test_add_variant_after_materialize(self) -> None:
        builder = TaskGraphBuilder(ProjectLayout(PROJECT_DIR), TOOLCHAIN,
                                   self.config, self.config.host_task_names())
        builder.materialize()
        with self.assertRaises(RuntimeError):
            builder.add_variant(self.config.variants()[0])

    def test_materialize_once(self) -> None:
        builder = TaskGraphBuilder(ProjectLayout(PROJECT_DIR), TOOLCHAIN,
                                   self.config, self.config.host_task_names())
        self.assertIs(builder.materialize(), builder.materialize())

    def test_duplicate_variant(self) -> None:
        builder = TaskGraphBuilder(ProjectLayout(PROJECT_DIR), TOOLCHAIN,
                                   self.config, self.config.host_task_names())
        variant = self.config.variants()[0]
        builder.add_variant(variant)
        with self.assertRaises(ConfigurationError):
            builder.add_variant(variant)


class CompileHookTest(unittest.TestCase):
    variant = BuildVariant('debug', 'debug', True)

    def test_preference_order(self) -> None:
        all_hooks = {
            'compileDebugNdk', 'externalNativeBuildDebug',
            'compileDebugSources'
        }
        self.assertIs(CompileHook.NDK_COMPILE,
                      select_compile_hook(self.variant, all_hooks))
        self.assertIs(
            CompileHook.EXTERNAL_NATIVE_BUILD,
            select_compile_hook(self.variant,
                                all_hooks - {'compileDebugNdk'}))
        self.assertIs(CompileHook.COMPILE_SOURCES,
                      select_compile_hook(self.variant, {'compileDebugSources'}))
        self.assertIsNone(select_compile_hook(self.variant, set()))

    def test_graph_uses_preferred_hook(self) -> None:
        config = ProjectConfig(ndk_compile=True, external_native_build=True)
        graph = make_graph(config)
        self.assertSetEqual({'copySwiftDebug'},
                            set(graph['compileDebugNdk'].deps))
        self.assertNotIn('externalNativeBuildDebug', graph)
        self.assertNotIn('compileDebugSources', graph)

    def test_missing_hook(self) -> None:
        config = ProjectConfig()
        with self.assertRaisesRegex(ConfigurationError, 'compileDebugNdk'):
            make_graph(config, host_tasks=frozenset(
                {'compileDebugJavaWithJavac'}))

    def test_missing_annotation_processor(self) -> None:
        config = ProjectConfig()
        with self.assertRaisesRegex(ConfigurationError,
                                    'compileDebugJavaWithJavac'):
            make_graph(config,
                       host_tasks=frozenset(
                           {'compileDebugSources', 'compileReleaseSources'}))


class CleanTasksTest(unittest.TestCase):
    def test_force_clean_by_default(self) -> None:
        graph = make_graph(ProjectConfig())
        self.assertSetEqual({FORCE_CLEAN_TASK}, set(graph[CLEAN_TASK].deps))
        self.assertEqual(PROJECT_DIR / 'src/main/swift/.build',
                         graph[FORCE_CLEAN_TASK].delete_dir)
        self.assertIn(PACKAGE_CLEAN_TASK, graph)
        self.assertSetEqual({CLEAN_TASK}, set(graph['clean'].deps))

    def test_package_clean(self) -> None:
        graph = make_graph(ProjectConfig(use_package_clean=True))
        self.assertSetEqual({PACKAGE_CLEAN_TASK}, set(graph[CLEAN_TASK].deps))
        self.assertEqual(('swift', 'package', 'clean'),
                         graph[PACKAGE_CLEAN_TASK].command)

    def test_clean_disabled(self) -> None:
        graph = make_graph(ProjectConfig(clean_enabled=False))
        self.assertNotIn('clean', graph)
        self.assertIn(CLEAN_TASK, graph)


class EndToEndTest(unittest.TestCase):
    def test_toolchain_from_properties_ndk_from_environment(self) -> None:
        toolchain = resolve({'swift-android.dir': '/opt/toolchain'},
                            {'ANDROID_NDK_HOME': '/opt/ndk'})
        self.assertEqual(Path('/opt/toolchain'), toolchain.toolchain_dir)
        self.assertEqual(Path('/opt/ndk'), toolchain.ndk_dir)
        self.assertTrue(toolchain.is_toolchain_present())
        self.assertTrue(toolchain.is_ndk_present())

        config = ProjectConfig(debug=FlagSet(('-Xswiftc', '-g')))
        command = make_graph(config, toolchain)['swiftBuildDebug'].command
        self.assertEqual(('--configuration', 'debug', '-Xswiftc', '-g'),
                         command[1:])

    def test_unresolved_toolchain_still_builds_graph(self) -> None:
        graph = make_graph(ProjectConfig(), resolve({}, {}))
        self.assertEqual('swift-build', graph['swiftBuildDebug'].command[0])
        spec = graph['copySwiftDebug'].copy_spec
        assert spec is not None
        self.assertEqual(2, len(spec.sources))
