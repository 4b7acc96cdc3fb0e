"""Environments and the resolvers that map them to physical locations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List

DEFAULT_BRANCH = "master"

BranchResolver = Callable[["Environment"], str]
PathResolver = Callable[["Environment"], str]


@dataclass(frozen=True)
class Environment:
    """Logical configuration location, e.g. ``"production"`` or ``"us-west/web"``.

    The empty name is the default (root) environment. Two environments are
    equal when their normalized names match.

    Attributes:
        name: Path-like environment name, stripped of surrounding whitespace.
    """

    name: str = field(default="")

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", (self.name or "").strip())

    @property
    def is_default(self) -> bool:
        """Whether this is the root environment."""
        return self.name == ""

    def tokens(self) -> List[str]:
        """Split the name on ``/`` keeping empty tokens.

        Returns:
            List of name segments; ``[""]`` for the default environment.
        """
        return self.name.split("/")

    def __str__(self) -> str:
        return self.name


DEFAULT_ENVIRONMENT = Environment()


class DefaultBranchResolver:
    """Use the environment name verbatim as the branch name.

    The default environment maps to ``default_branch``.
    """

    def __init__(self, default_branch: str = DEFAULT_BRANCH):
        self.default_branch = default_branch

    def __call__(self, environment: Environment) -> str:
        if environment.is_default:
            return self.default_branch
        return environment.name


class DefaultPathResolver:
    """Use the environment name as a sub-path, trimmed of separators."""

    def __call__(self, environment: Environment) -> str:
        return environment.name.strip("/")


class FirstTokenBranchResolver:
    """Use the first ``/``-separated token of the environment as the branch.

    An empty first token (default environment, or a name starting with ``/``)
    maps to ``default_branch``.
    """

    def __init__(self, default_branch: str = DEFAULT_BRANCH):
        self.default_branch = default_branch

    def __call__(self, environment: Environment) -> str:
        first = environment.tokens()[0].strip()
        return first or self.default_branch


class AllButFirstTokenPathResolver:
    """Use everything after the first ``/``-separated token as the sub-path."""

    def __call__(self, environment: Environment) -> str:
        rest = environment.tokens()[1:]
        return "/".join(rest).strip("/")
