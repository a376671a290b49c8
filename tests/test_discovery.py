"""
Tests for command discovery — Which files under Commands/ are commands

Covers:
- Stage parsing from file names (alpha./beta./production)
- Direct files and same-named subfolder files are commands
- Helpers, data files and metadata sidecars never are
- Visibility policy filtering
- Missing Commands/ folder yields nothing
"""

import pytest

from stubinvoke.core.commands import (
    CommandKind, LifecycleStage, has_reserved_prefix, split_stage,
)
from stubinvoke.core.context import EngineContext, VisibilityPolicy
from stubinvoke.core.discovery import build_command, command_names, discover, discover_stub


# =============================================================================
# Lifecycle model
# =============================================================================

class TestSplitStage:
    """Stage is derived once from the file stem."""

    def test_alpha_prefix(self):
        assert split_stage("alpha.deploy") == (LifecycleStage.ALPHA, "deploy")

    def test_beta_prefix(self):
        assert split_stage("beta.deploy") == (LifecycleStage.BETA, "deploy")

    def test_no_prefix_is_production(self):
        assert split_stage("deploy") == (LifecycleStage.PRODUCTION, "deploy")

    def test_prefix_alone_is_not_a_stage(self):
        """'alpha.' with nothing after it is not an alpha command."""
        stage, _name = split_stage("alpha.")
        assert stage is LifecycleStage.PRODUCTION

    def test_precedence_order(self):
        assert LifecycleStage.ALPHA.precedence < LifecycleStage.BETA.precedence
        assert LifecycleStage.BETA.precedence < LifecycleStage.PRODUCTION.precedence

    def test_reserved_prefixes(self):
        assert has_reserved_prefix("alpha.deploy")
        assert has_reserved_prefix("Beta.deploy")
        assert has_reserved_prefix("metadata.tool")
        assert not has_reserved_prefix("deploy")
        assert not has_reserved_prefix("alphabet")


class TestVisibilityPolicy:
    """Production is always visible; pre-release stages on request."""

    def test_default_is_production_only(self):
        policy = VisibilityPolicy()
        assert policy.stages() == (LifecycleStage.PRODUCTION,)

    def test_all_enabled_in_precedence_order(self):
        policy = VisibilityPolicy(alpha_enabled=True, beta_enabled=True)
        assert policy.stages() == (
            LifecycleStage.ALPHA, LifecycleStage.BETA, LifecycleStage.PRODUCTION
        )

    def test_beta_without_alpha(self):
        policy = VisibilityPolicy(beta_enabled=True)
        assert not policy.allows(LifecycleStage.ALPHA)
        assert policy.allows(LifecycleStage.BETA)


class TestEngineContext:
    """Extension settings and kind mapping."""

    def test_extensions_normalized(self):
        context = EngineContext(script_extension="PY", executable_extension="bin")
        assert context.extensions == (".py", ".bin")

    def test_kind_for(self, tmp_path):
        context = EngineContext()
        assert context.kind_for(tmp_path / "a.py") is CommandKind.SCRIPT
        assert context.kind_for(tmp_path / "a.exe") is CommandKind.EXECUTABLE
        assert context.kind_for(tmp_path / "a.txt") is None
        assert context.kind_for(tmp_path / "a.pyc") is None

    def test_with_policy_returns_copy(self):
        context = EngineContext()
        enabled = context.with_policy(alpha=True)
        assert enabled.policy.alpha_enabled
        assert not context.policy.alpha_enabled


# =============================================================================
# build_command
# =============================================================================

class TestBuildCommand:
    """Single-file classification."""

    def test_direct_script(self, tmp_path):
        command = build_command(tmp_path / "deploy.py", EngineContext(), stub="Demo")
        assert command.name == "deploy"
        assert command.kind is CommandKind.SCRIPT
        assert command.stage is LifecycleStage.PRODUCTION
        assert command.qualified_name == "Demo deploy"

    def test_staged_executable(self, tmp_path):
        command = build_command(tmp_path / "beta.deploy.exe", EngineContext())
        assert command.kind is CommandKind.EXECUTABLE
        assert command.stage is LifecycleStage.BETA
        assert command.display_name == "beta.deploy"

    def test_foreign_extension(self, tmp_path):
        assert build_command(tmp_path / "notes.txt", EngineContext()) is None

    def test_metadata_is_never_a_command(self, tmp_path):
        assert build_command(tmp_path / "metadata.tool.exe", EngineContext()) is None

    def test_subfolder_name_must_match(self, tmp_path):
        context = EngineContext()
        assert build_command(tmp_path / "build" / "helper.py", context, folder="build") is None
        assert build_command(tmp_path / "build" / "build.py", context, folder="build") is not None
        assert build_command(tmp_path / "build" / "alpha.build.py", context, folder="build") is not None


# =============================================================================
# discover
# =============================================================================

class TestDiscover:
    """Directory scans under a visibility policy."""

    def test_production_only_by_default(self, staged_env):
        commands = discover_stub("Tools", staged_env.context())
        names = [(c.name, c.stage) for c in commands]
        assert ("release", LifecycleStage.PRODUCTION) in names
        assert all(c.stage is LifecycleStage.PRODUCTION for c in commands)
        assert "probe" not in command_names(commands)

    def test_all_stages_when_enabled(self, staged_env):
        commands = discover_stub("Tools", staged_env.context(alpha=True, beta=True))
        releases = [c for c in commands if c.name == "release"]
        assert [c.stage for c in releases] == [
            LifecycleStage.ALPHA, LifecycleStage.BETA, LifecycleStage.PRODUCTION
        ]
        assert "probe" in command_names(commands)

    def test_subfolder_yields_exactly_one_command(self, staged_env):
        """build/build.py is a command; build/notes.txt and build/helper.py are not."""
        commands = discover_stub("Tools", staged_env.context(alpha=True, beta=True))
        build = [c for c in commands if c.path.parent.name == "build"]
        assert len(build) == 1
        assert build[0].name == "build"

    def test_helper_never_discovered(self, staged_env):
        for alpha in (False, True):
            for beta in (False, True):
                names = command_names(discover_stub("Tools", staged_env.context(alpha, beta)))
                assert "helper" not in names

    def test_sidecar_not_listed(self, staged_env):
        names = command_names(discover_stub("Tools", staged_env.context()))
        assert names == ["build", "lint", "release"]

    def test_names_are_deduplicated(self, staged_env):
        names = command_names(discover_stub("Tools", staged_env.context(alpha=True, beta=True)))
        assert names.count("release") == 1

    def test_missing_commands_dir_is_empty(self, stub_factory):
        root = stub_factory.add_stub("Empty", with_commands_dir=False)
        assert discover(root, stub_factory.context()) == []

    def test_missing_root_is_empty(self, tmp_path):
        assert discover(tmp_path / "nowhere", EngineContext()) == []

    def test_unknown_stub_is_empty(self, stub_factory):
        assert discover_stub("Nope", stub_factory.context()) == []

    def test_nested_folders_not_scanned(self, stub_factory):
        """Only the first level of subfolders is inspected."""
        stub_factory.add_stub("Deep")
        stub_factory.add_script("Deep", "inner", folder="outer/inner")
        assert discover_stub("Deep", stub_factory.context()) == []

    def test_commands_record_stub(self, demo_env):
        commands = discover_stub("Demo", demo_env.context())
        assert [c.stub for c in commands] == ["Demo"]

    def test_custom_extensions(self, stub_factory):
        stub_factory.add_stub("Custom")
        stub_factory.add_file("Custom", "tool.sh", "#!/bin/sh\n")
        context = EngineContext(
            registry=stub_factory.registry,
            script_extension=".py",
            executable_extension=".sh"
        )
        commands = discover_stub("Custom", context)
        assert [(c.name, c.kind) for c in commands] == [("tool", CommandKind.EXECUTABLE)]

    @pytest.mark.parametrize("file_name", ["README.md", "deploy.ps1", "deploy.py.bak"])
    def test_other_files_ignored(self, stub_factory, file_name):
        stub_factory.add_stub("Misc")
        stub_factory.add_file("Misc", file_name, "x")
        assert discover_stub("Misc", stub_factory.context()) == []
