"""
Opportunity Ranker
Risk-adjusted ordering: prefer big TVL + decent APY + low risk score
"""

import math
from typing import Iterable, List

from services.pool_normalizer import PoolRecord
from services.risk_scorer import clamp, score_pool

APY_SCORE_CAP = 200
APY_WEIGHT = 0.6
TVL_LOG_WEIGHT = 10
RISK_WEIGHT = 0.7


def opportunity_score(pool: PoolRecord) -> float:
    """
    Composite score, used only for ordering.

    APY contribution is capped so outliers don't dominate and TVL is
    log-scaled. Risk is penalized linearly.
    """
    if pool.risk_score is None:
        pool = score_pool(pool)
    apy_capped = clamp(pool.apy, 0, APY_SCORE_CAP)
    tvl_log = math.log10(max(1.0, pool.tvl_usd))
    return apy_capped * APY_WEIGHT + tvl_log * TVL_LOG_WEIGHT - pool.risk_score * RISK_WEIGHT


def rank_opportunities(pools: Iterable[PoolRecord]) -> List[PoolRecord]:
    """Sort by opportunity score desc. Ties keep input order."""
    scored = [p if p.risk_score is not None else score_pool(p) for p in pools]
    return sorted(scored, key=opportunity_score, reverse=True)
