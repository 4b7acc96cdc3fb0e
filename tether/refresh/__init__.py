"""Refresh strategies driving when sources re-sync."""

from .strategies import (
    OnInitRefreshStrategy,
    PeriodicalRefreshStrategy,
    RefreshStrategy,
    StrategyState,
)

__all__ = [
    "OnInitRefreshStrategy",
    "PeriodicalRefreshStrategy",
    "RefreshStrategy",
    "StrategyState",
]
