"""Unit tests for Environment and the branch/path resolvers."""

from __future__ import annotations

import pytest

from tether.core.environment import (
    DEFAULT_ENVIRONMENT,
    AllButFirstTokenPathResolver,
    DefaultBranchResolver,
    DefaultPathResolver,
    Environment,
    FirstTokenBranchResolver,
)


class TestEnvironment:
    """Test suite for the Environment value."""

    def test_default(self):
        """Test the default environment."""
        assert Environment().name == ""
        assert Environment() == DEFAULT_ENVIRONMENT
        assert DEFAULT_ENVIRONMENT.is_default

    def test_normalization_and_equality(self):
        """Test that names are stripped before comparison."""
        assert Environment("  production ") == Environment("production")
        assert Environment("production") != Environment("staging")
        assert Environment("   ").is_default

    def test_hashable(self):
        """Test environments can key a dict."""
        envs = {Environment("a"): 1, Environment(" a"): 2}
        assert envs == {Environment("a"): 2}

    def test_immutable(self):
        """Test that environments are frozen."""
        env = Environment("a")
        with pytest.raises(AttributeError):
            env.name = "b"  # type: ignore[misc]

    def test_tokens(self):
        """Test splitting names on separators."""
        assert Environment("us/west/web").tokens() == ["us", "west", "web"]
        assert Environment("/x/").tokens() == ["", "x", ""]
        assert Environment().tokens() == [""]

    def test_str(self):
        """Test string conversion."""
        assert str(Environment("prod")) == "prod"


class TestDefaultResolvers:
    """Resolvers that use the environment name directly."""

    def test_branch_verbatim(self):
        """Test the branch resolver returns the name as-is."""
        resolver = DefaultBranchResolver()
        assert resolver(Environment("testEnvBranch")) == "testEnvBranch"
        assert resolver(Environment("release/1.0")) == "release/1.0"

    def test_branch_default(self):
        """Test the root environment maps to the default branch."""
        assert DefaultBranchResolver()(DEFAULT_ENVIRONMENT) == "master"
        assert DefaultBranchResolver("main")(DEFAULT_ENVIRONMENT) == "main"

    def test_path(self):
        """Test the path resolver trims separators."""
        resolver = DefaultPathResolver()
        assert resolver(Environment("/otherApplicationConfigs/")) == "otherApplicationConfigs"
        assert resolver(Environment("a/b")) == "a/b"
        assert resolver(DEFAULT_ENVIRONMENT) == ""


class TestTokenResolvers:
    """Resolvers splitting the environment into branch and sub-path."""

    @pytest.mark.parametrize(
        "name, branch, path",
        [
            ("", "master", ""),
            ("testEnvBranch", "testEnvBranch", ""),
            ("/otherApplicationConfigs/", "master", "otherApplicationConfigs"),
            ("production/eu/web", "production", "eu/web"),
            ("production/", "production", ""),
        ],
    )
    def test_split(self, name, branch, path):
        """Test first token as branch and the rest as path."""
        env = Environment(name)
        assert FirstTokenBranchResolver()(env) == branch
        assert AllButFirstTokenPathResolver()(env) == path

    def test_custom_default_branch(self):
        """Test an empty first token falls back to the configured branch."""
        assert FirstTokenBranchResolver("main")(Environment("/apps")) == "main"
