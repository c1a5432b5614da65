"""
Strategy Agents
Recommendation engine for the Base daily yield review
"""

from .strategy_agent import (
    Recommendation,
    RecommendedAction,
    recommend,
)

__all__ = [
    "Recommendation",
    "RecommendedAction",
    "recommend",
]
