"""
Tests for completion queries — Called on every keystroke, never raise

Matching is a case-insensitive prefix test. Unknown stubs, broken scripts
and partial input all produce empty results instead of errors.
"""

from unittest.mock import patch

from stubinvoke.services.completion import (
    complete_line, list_command_names, list_parameters, list_stub_names,
)


OPTIONS_SCRIPT = '''
import argparse
parser = argparse.ArgumentParser()
parser.add_argument("target")
parser.add_argument("--force", action="store_true")
parser.add_argument("--format", choices=["json", "text"])
'''


class TestListStubNames:
    """First-word completion."""

    def test_all_sorted(self, stub_factory):
        for name in ("beta", "Alpha", "gamma"):
            stub_factory.add_stub(name)
        assert list_stub_names(stub_factory.context()) == ["Alpha", "beta", "gamma"]

    def test_prefix_case_insensitive(self, stub_factory):
        stub_factory.add_stub("Demo")
        stub_factory.add_stub("dev")
        stub_factory.add_stub("ops")
        assert list_stub_names(stub_factory.context(), "DE") == ["Demo", "dev"]

    def test_include_verbs(self, stub_factory):
        stub_factory.add_stub("Demo")
        assert list_stub_names(stub_factory.context(), include_verbs=True) == [
            "search", "help", "update", "Demo"
        ]

    def test_empty_registry(self, stub_factory):
        assert list_stub_names(stub_factory.context(), "x") == []

    def test_failure_is_empty(self, stub_factory):
        context = stub_factory.context()
        with patch.object(type(context.registry), "names", side_effect=RuntimeError("boom")):
            assert list_stub_names(context) == []


class TestListCommandNames:
    """Second-word completion."""

    def test_visible_names(self, staged_env):
        assert list_command_names(staged_env.context(), "Tools") == ["build", "lint", "release"]

    def test_prerelease_names_without_prefix(self, staged_env):
        names = list_command_names(staged_env.context(alpha=True), "Tools")
        assert "probe" in names
        assert not any(n.startswith("alpha.") for n in names)

    def test_partial(self, staged_env):
        assert list_command_names(staged_env.context(), "Tools", "RE") == ["release"]

    def test_unknown_stub(self, staged_env):
        assert list_command_names(staged_env.context(), "Nope") == []

    def test_stub_without_commands_dir(self, stub_factory):
        stub_factory.add_stub("Bare", with_commands_dir=False)
        assert list_command_names(stub_factory.context(), "Bare") == []


class TestListParameters:
    """Parameter schema of the resolved command."""

    def test_schema(self, stub_factory):
        stub_factory.add_stub("s")
        stub_factory.add_script("s", "go", OPTIONS_SCRIPT)
        schema = list_parameters(stub_factory.context(), "s", "go")
        assert schema.names() == ["target", "force", "format"]

    def test_unknown_command_is_empty(self, stub_factory):
        stub_factory.add_stub("s")
        assert len(list_parameters(stub_factory.context(), "s", "nope")) == 0

    def test_unknown_stub_is_empty(self, stub_factory):
        assert len(list_parameters(stub_factory.context(), "nope", "go")) == 0

    def test_broken_script_is_empty(self, stub_factory):
        stub_factory.add_stub("s")
        stub_factory.add_script("s", "bad", "this is not python (\n")
        assert len(list_parameters(stub_factory.context(), "s", "bad")) == 0


class TestCompleteLine:
    """Whole-line completion used by the --complete flag."""

    def test_first_word(self, staged_env):
        assert complete_line(staged_env.context(), ["T"]) == ["Tools"]

    def test_first_word_includes_verbs(self, staged_env):
        assert complete_line(staged_env.context(), ["h"]) == ["help"]

    def test_no_words(self, staged_env):
        assert complete_line(staged_env.context(), []) == ["search", "help", "update", "Tools"]

    def test_command_word(self, staged_env):
        assert complete_line(staged_env.context(), ["Tools", "b"]) == ["build"]

    def test_verb_arguments(self, staged_env):
        assert complete_line(staged_env.context(), ["help", ""]) == ["Tools"]
        assert complete_line(staged_env.context(), ["help", "Tools", "l"]) == ["lint"]
        assert complete_line(staged_env.context(), ["update", "T"]) == ["Tools"]
        assert complete_line(staged_env.context(), ["search", "x"]) == []

    def test_option_flags(self, stub_factory):
        stub_factory.add_stub("s")
        stub_factory.add_script("s", "go", OPTIONS_SCRIPT)
        assert complete_line(stub_factory.context(), ["s", "go", "--f"]) == ["--force", "--format"]
        assert complete_line(stub_factory.context(), ["s", "go", ""]) == ["--force", "--format"]

    def test_positional_value_not_completed(self, stub_factory):
        stub_factory.add_stub("s")
        stub_factory.add_script("s", "go", OPTIONS_SCRIPT)
        assert complete_line(stub_factory.context(), ["s", "go", "val"]) == []
