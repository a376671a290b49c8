"""
Tests for the Invoker — Argument forwarding and child process outcomes

Scripts run under the configured interpreter with raw text split once by
shlex, or with tokens forwarded unchanged. Executables get an OS argument
vector with no shell in between. Zero arguments means zero arguments.
"""

import json
import os
import sys
from unittest.mock import patch

import pytest

from stubinvoke.core.commands import CommandFile, CommandKind, LifecycleStage
from stubinvoke.core.context import EngineContext
from stubinvoke.errors import CommandFailedError, CommandLaunchError, UsageError
from stubinvoke.introspection.schema import Parameter, ParameterSchema
from stubinvoke.services.invoker import (
    Invoker, build_argv, forwarded_args, split_raw, validate_arguments,
)
from tests.factories import requires_posix


def _script(path):
    return CommandFile(path=path, name="run", stage=LifecycleStage.PRODUCTION, kind=CommandKind.SCRIPT)


def _executable(path):
    return CommandFile(path=path, name="run", stage=LifecycleStage.PRODUCTION, kind=CommandKind.EXECUTABLE)


# =============================================================================
# Argument vectors
# =============================================================================

class TestSplitRaw:
    """POSIX quoting, one pass."""

    def test_quoted_token_kept_whole(self):
        assert split_raw('deploy "two words" --flag') == ["deploy", "two words", "--flag"]

    def test_empty(self):
        assert split_raw("") == []

    def test_unbalanced_quote_is_usage_error(self):
        with pytest.raises(UsageError):
            split_raw('"open')


class TestForwardedArgs:
    """Per-kind forwarding policy."""

    def test_script_prefers_raw_text(self, tmp_path):
        command = _script(tmp_path / "run.py")
        assert forwarded_args(command, raw_args="a 'b c'", tokens=["x"]) == ["a", "b c"]

    def test_script_tokens_forwarded_losslessly(self, tmp_path):
        """No join-and-resplit: a token with spaces stays one argument."""
        command = _script(tmp_path / "run.py")
        assert forwarded_args(command, tokens=["two words", "it's"]) == ["two words", "it's"]

    def test_executable_prefers_tokens(self, tmp_path):
        command = _executable(tmp_path / "run.exe")
        assert forwarded_args(command, raw_args="ignored", tokens=["a b"]) == ["a b"]

    def test_executable_raw_fallback(self, tmp_path):
        command = _executable(tmp_path / "run.exe")
        assert forwarded_args(command, raw_args="--x 'y z'") == ["--x", "y z"]

    def test_nothing_is_nothing(self, tmp_path):
        assert forwarded_args(_executable(tmp_path / "run.exe")) == []
        assert forwarded_args(_script(tmp_path / "run.py")) == []


class TestBuildArgv:
    """Full child argv."""

    def test_script_runs_under_interpreter(self, tmp_path):
        command = _script(tmp_path / "run.py")
        argv = build_argv(command, EngineContext(), tokens=["--env", "prod"])
        assert argv == [sys.executable, str(tmp_path / "run.py"), "--env", "prod"]

    def test_configured_interpreter(self, tmp_path):
        command = _script(tmp_path / "run.py")
        argv = build_argv(command, EngineContext(interpreter="/opt/py/bin/python"))
        assert argv[0] == "/opt/py/bin/python"

    def test_zero_arg_executable_has_no_sentinel(self, tmp_path):
        command = _executable(tmp_path / "run.exe")
        assert build_argv(command, EngineContext()) == [str(tmp_path / "run.exe")]
        assert build_argv(command, EngineContext(), tokens=[]) == [str(tmp_path / "run.exe")]


class TestValidateArguments:
    """Pre-flight check against the declared schema."""

    @pytest.fixture
    def schema(self):
        return ParameterSchema([
            Parameter(name="env", required=True),
            Parameter(name="tag", flag="--tag", required=True),
            Parameter(name="dry-run", flag="--dry-run", type="bool"),
        ])

    def test_all_present(self, schema):
        assert validate_arguments(schema, ["prod", "--tag", "v1"]).ok

    def test_flag_with_equals(self, schema):
        assert validate_arguments(schema, ["prod", "--tag=v1"]).ok

    def test_missing_option_and_positional(self, schema):
        check = validate_arguments(schema, ["--dry-run"])
        assert not check.ok
        assert check.missing == ["--tag", "env"]

    def test_unknown_flag_reported_not_fatal(self, schema):
        check = validate_arguments(schema, ["prod", "--tag", "v1", "--colour"])
        assert check.ok
        assert check.unknown == ["--colour"]

    def test_after_separator_is_positional(self, schema):
        check = validate_arguments(schema, ["--tag", "v1", "--", "--prod"])
        assert check.ok

    def test_empty_schema_accepts_anything(self):
        assert validate_arguments(ParameterSchema.empty(), ["--whatever"]).ok


# =============================================================================
# Child processes
# =============================================================================

class TestInvokeScript:
    """Real child processes for Python scripts."""

    def test_tokens_reach_script_unchanged(self, stub_factory, tmp_path):
        out = tmp_path / "args.json"
        stub_factory.add_stub("s")
        stub_factory.add_recording_script("s", "rec", out)
        command = stub_factory.resolver().require("s", "rec")

        result = Invoker(stub_factory.context()).invoke(command, tokens=["two words", "$HOME", ""])

        assert result == 0
        assert json.loads(out.read_text()) == ["two words", "$HOME", ""]

    def test_raw_text_split_once(self, stub_factory, tmp_path):
        out = tmp_path / "args.json"
        stub_factory.add_stub("s")
        stub_factory.add_recording_script("s", "rec", out)
        command = stub_factory.resolver().require("s", "rec")

        Invoker(stub_factory.context()).invoke(command, raw_args='--msg "hello world" x')

        assert json.loads(out.read_text()) == ["--msg", "hello world", "x"]

    def test_zero_args(self, stub_factory, tmp_path):
        out = tmp_path / "args.json"
        stub_factory.add_stub("s")
        stub_factory.add_recording_script("s", "rec", out)
        command = stub_factory.resolver().require("s", "rec")

        Invoker(stub_factory.context()).invoke(command)

        assert json.loads(out.read_text()) == []

    def test_nonzero_exit_raises_with_code(self, stub_factory, tmp_path):
        stub_factory.add_stub("s")
        stub_factory.add_recording_script("s", "fail", tmp_path / "out.json", exit_code=4)
        command = stub_factory.resolver().require("s", "fail")

        with pytest.raises(CommandFailedError) as exc:
            Invoker(stub_factory.context()).invoke(command)
        assert exc.value.exit_code == 4

    def test_runs_in_given_cwd(self, stub_factory, tmp_path):
        workdir = tmp_path / "work"
        workdir.mkdir()
        stub_factory.add_stub("s")
        stub_factory.add_script("s", "touch", "open('made.txt', 'w').close()\n")
        command = stub_factory.resolver().require("s", "touch")

        Invoker(stub_factory.context()).invoke(command, cwd=workdir)

        assert (workdir / "made.txt").exists()

    def test_missing_interpreter_is_launch_error(self, stub_factory, tmp_path):
        stub_factory.add_stub("s")
        stub_factory.add_script("s", "ok")
        command = stub_factory.resolver().require("s", "ok")
        context = stub_factory.context()
        context.interpreter = str(tmp_path / "no-such-python")

        with pytest.raises(CommandLaunchError) as exc:
            Invoker(context).invoke(command)
        assert exc.value.exit_code == 127


class TestFailureStatus:
    """Child return codes become valid process exit statuses."""

    def test_plain_exit_code_kept(self):
        error = CommandFailedError("build", 4)
        assert error.exit_code == 4
        assert "exit code 4" in error.message

    def test_signal_is_128_plus_n(self):
        error = CommandFailedError("build", -9)
        assert error.returncode == -9
        assert error.exit_code == 137
        assert "signal 9" in error.message
        assert "-9" in error.message


@requires_posix
class TestInvokeExecutable:
    """Real child processes for native executables (shell-backed)."""

    def test_zero_argument_invocation_sees_zero_arguments(self, stub_factory, tmp_path):
        out = tmp_path / "count.txt"
        stub_factory.add_stub("s")
        stub_factory.add_recording_executable("s", "count", out)
        command = stub_factory.resolver().require("s", "count")

        Invoker(stub_factory.context()).invoke(command)

        assert out.read_text().splitlines() == ["0"]

    def test_metacharacters_not_interpreted(self, stub_factory, tmp_path):
        out = tmp_path / "count.txt"
        stub_factory.add_stub("s")
        stub_factory.add_recording_executable("s", "count", out)
        command = stub_factory.resolver().require("s", "count")

        Invoker(stub_factory.context()).invoke(command, tokens=["a;b", "$HOME", "two words"])

        assert out.read_text().splitlines() == ["3", "a;b", "$HOME", "two words"]

    def test_nonzero_exit_code_propagates(self, stub_factory, tmp_path):
        stub_factory.add_stub("s")
        stub_factory.add_recording_executable("s", "fail", tmp_path / "c.txt", exit_code=3)
        command = stub_factory.resolver().require("s", "fail")

        with pytest.raises(CommandFailedError) as exc:
            Invoker(stub_factory.context()).invoke(command)
        assert exc.value.exit_code == 3

    def test_killed_by_signal_maps_to_shell_status(self, stub_factory):
        stub_factory.add_stub("s")
        stub_factory.add_executable("s", "die", "kill -TERM $$")
        command = stub_factory.resolver().require("s", "die")

        with pytest.raises(CommandFailedError) as exc:
            Invoker(stub_factory.context()).invoke(command)
        assert exc.value.returncode == -15
        assert exc.value.exit_code == 143
        assert "signal 15" in exc.value.message

    def test_file_removed_after_resolution(self, stub_factory):
        stub_factory.add_stub("s")
        path = stub_factory.add_executable("s", "gone")
        command = stub_factory.resolver().require("s", "gone")
        path.unlink()

        with pytest.raises(CommandLaunchError) as exc:
            Invoker(stub_factory.context()).invoke(command)
        assert "not found" in exc.value.message

    def test_not_executable_is_launch_error(self, stub_factory):
        stub_factory.add_stub("s")
        path = stub_factory.add_executable("s", "noexec")
        os.chmod(path, 0o644)
        command = stub_factory.resolver().require("s", "noexec")

        with pytest.raises(CommandLaunchError):
            Invoker(stub_factory.context()).invoke(command)

    def test_no_shell_used(self, stub_factory):
        stub_factory.add_stub("s")
        stub_factory.add_executable("s", "ok")
        command = stub_factory.resolver().require("s", "ok")

        with patch("stubinvoke.services.invoker.subprocess.run") as run:
            run.return_value.returncode = 0
            Invoker(stub_factory.context()).invoke(command, tokens=["x"])

        args, kwargs = run.call_args
        assert args[0] == [str(command.path), "x"]
        assert not kwargs.get("shell", False)
