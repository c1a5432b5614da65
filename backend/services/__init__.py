"""
Opportunity Selection Services
Normalization, risk scoring, ranking and pool filtering
"""

from .pool_normalizer import PoolRecord, normalize_pool, normalize_snapshot
from .risk_scorer import compute_risk_score, score_pool
from .opportunity_ranker import opportunity_score, rank_opportunities
from .pool_selector import SelectionStats, select_opportunities, select_safe_pools

__all__ = [
    # Normalizer
    "PoolRecord",
    "normalize_pool",
    "normalize_snapshot",

    # Risk
    "compute_risk_score",
    "score_pool",

    # Ranking
    "opportunity_score",
    "rank_opportunities",

    # Selection
    "SelectionStats",
    "select_opportunities",
    "select_safe_pools",
]
