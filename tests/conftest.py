"""
Shared pytest fixtures for the stubinvoke test suite.

Every test runs against stub trees built in tmp_path by StubTestFactory,
with STUBINVOKE_* environment variables cleared and the config directory
redirected, so no test reads or writes the real ~/.stubinvoke.

Usage in tests:
    def test_something(stub_factory):
        stub_factory.add_stub("Tools")
        stub_factory.add_script("Tools", "build")
        resolver = stub_factory.resolver()

    def test_with_demo(demo_env):
        # Demo stub with deploy.exe and beta.deploy.exe
        result = demo_env.resolver(beta=True).resolve("Demo", "deploy")
"""

import os

import pytest

from tests.factories import StubTestFactory


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Clear STUBINVOKE_* overrides and point the config home at tmp_path."""
    for key in list(os.environ):
        if key.startswith("STUBINVOKE_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("STUBINVOKE_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("STUBINVOKE_ASCII_ONLY", "1")


@pytest.fixture
def stub_factory(tmp_path):
    """
    Create an empty StubTestFactory.

    Use this when a test needs fine-grained control over the stub tree.
    """
    return StubTestFactory(tmp_path)


@pytest.fixture
def demo_env(tmp_path):
    """
    Stub 'Demo' with a production and a beta deploy.

    Layout:
        Demo/Commands/deploy.exe
        Demo/Commands/beta.deploy.exe
    """
    factory = StubTestFactory(tmp_path)
    factory.add_stub("Demo")
    factory.add_executable("Demo", "deploy")
    factory.add_executable("Demo", "beta.deploy")
    return factory


@pytest.fixture
def staged_env(tmp_path):
    """
    Stub 'Tools' exercising every discovery rule.

    Layout:
        Tools/Commands/build/build.py          subfolder command
        Tools/Commands/build/notes.txt         data file (ignored)
        Tools/Commands/build/helper.py         helper (never a command)
        Tools/Commands/release.py              production
        Tools/Commands/beta.release.py         beta
        Tools/Commands/alpha.release.py        alpha
        Tools/Commands/alpha.probe.py          alpha only
        Tools/Commands/lint.exe                executable
        Tools/Commands/metadata.lint.yaml      sidecar (never a command)
    """
    factory = StubTestFactory(tmp_path)
    factory.add_stub("Tools")
    factory.add_script("Tools", "build", folder="build")
    factory.add_file("Tools", "build/notes.txt", "release notes")
    factory.add_script("Tools", "helper", folder="build")
    factory.add_script("Tools", "release")
    factory.add_script("Tools", "beta.release")
    factory.add_script("Tools", "alpha.release")
    factory.add_script("Tools", "alpha.probe")
    factory.add_executable("Tools", "lint")
    factory.add_sidecar("Tools", "lint", {"synopsis": "Lint the tree"})
    return factory
