from .environment import Environment
from .provider import ConfigurationProvider
from .source import ConfigurationSource, Refreshable

__all__ = [
    "Environment",
    "ConfigurationProvider",
    "ConfigurationSource",
    "Refreshable",
]
