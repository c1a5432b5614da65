"""
Pool Selector
Filter pipeline that narrows a DefiLlama snapshot down to Base candidates

Stages (in order, each a subset of the previous):
1. Chain filter      - chain == base
2. Scope filter      - aerodrome / lending / all
3. Token filter      - USDC / ETH / MIXED
4. Safety bounds     - 0 < APY <= cap, TVL >= minimum

Also builds the Aerodrome "top 5 safe" allow-list (TVL ranked).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple, Union

from config.policy import (
    AERODROME_KEYWORD,
    APY_CAP_PCT,
    LENDING_PROJECTS,
    MIN_TVL_USD,
    RISKY_TOKEN_BLACKLIST,
    SAFE_POOL_LIMIT,
    SAFE_POOL_MIN_AGE_DAYS,
    TARGET_CHAIN,
    Scope,
    TokenPreference,
)
from services.opportunity_ranker import rank_opportunities
from services.pool_normalizer import PoolRecord, normalize_snapshot
from services.risk_scorer import score_pool

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


@dataclass(frozen=True)
class SelectionStats:
    """Pool counts after each stage (diagnostics only)"""
    total: int
    after_chain_filter: int
    after_scope_filter: int
    after_token_filter: int
    excluded_by_apy_cap: int
    excluded_by_min_tvl: int
    returned: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "afterChainFilter": self.after_chain_filter,
            "afterScopeFilter": self.after_scope_filter,
            "afterTokenFilter": self.after_token_filter,
            "excludedByApyCap": self.excluded_by_apy_cap,
            "excludedByMinTvl": self.excluded_by_min_tvl,
            "returned": self.returned,
        }


def parse_scope(value: Union[Scope, str]) -> Scope:
    if isinstance(value, Scope):
        return value
    return Scope(str(value).strip().lower())


def parse_token_preference(value: Union[TokenPreference, str]) -> TokenPreference:
    if isinstance(value, TokenPreference):
        return value
    return TokenPreference(str(value).strip().upper())


# ============================================
# PREDICATES
# ============================================

def on_target_chain(pool: PoolRecord) -> bool:
    return pool.chain.lower() == TARGET_CHAIN


def is_aerodrome(pool: PoolRecord) -> bool:
    return AERODROME_KEYWORD in pool.project.lower()


def matches_scope(pool: PoolRecord, scope: Scope) -> bool:
    project = pool.project.lower()
    if scope == Scope.AERODROME:
        return AERODROME_KEYWORD in project
    if scope == Scope.LENDING:
        return project in LENDING_PROJECTS
    return AERODROME_KEYWORD in project or project in LENDING_PROJECTS


def matches_token_preference(pool: PoolRecord, preference: TokenPreference) -> bool:
    if preference == TokenPreference.MIXED:
        return True
    return preference.value in pool.symbol.upper()


def contains_blacklisted_token(symbol: str) -> bool:
    upper = symbol.upper()
    return any(token in upper for token in RISKY_TOKEN_BLACKLIST)


def within_safety_bounds(pool: PoolRecord) -> bool:
    return 0 < pool.apy <= APY_CAP_PCT and pool.tvl_usd >= MIN_TVL_USD


# ============================================
# PIPELINES
# ============================================

def select_opportunities(
    snapshot: Iterable[Any],
    scope: Union[Scope, str] = Scope.ALL,
    token_preference: Union[TokenPreference, str] = TokenPreference.USDC,
    limit: int = DEFAULT_LIMIT,
) -> Tuple[List[PoolRecord], SelectionStats]:
    """
    Filter, score and rank a raw snapshot.

    Returns:
        (top `limit` candidates, SelectionStats)
    """
    scope = parse_scope(scope)
    token_preference = parse_token_preference(token_preference)

    pools = normalize_snapshot(snapshot)
    by_chain = [p for p in pools if on_target_chain(p)]
    by_scope = [p for p in by_chain if matches_scope(p, scope)]
    by_token = [p for p in by_scope if matches_token_preference(p, token_preference)]

    # Tallied independently, so one pool can land in both counts
    excluded_by_apy_cap = sum(1 for p in by_token if p.apy > APY_CAP_PCT)
    excluded_by_min_tvl = sum(1 for p in by_token if p.tvl_usd < MIN_TVL_USD)

    eligible = [p for p in by_token if within_safety_bounds(p)]
    ranked = rank_opportunities(score_pool(p) for p in eligible)
    candidates = ranked[:max(0, limit)]

    stats = SelectionStats(
        total=len(pools),
        after_chain_filter=len(by_chain),
        after_scope_filter=len(by_scope),
        after_token_filter=len(by_token),
        excluded_by_apy_cap=excluded_by_apy_cap,
        excluded_by_min_tvl=excluded_by_min_tvl,
        returned=len(candidates),
    )
    logger.debug(
        f"[PoolSelector] scope={scope.value} token={token_preference.value} "
        f"total={stats.total} by_chain={stats.after_chain_filter} "
        f"by_scope={stats.after_scope_filter} by_token={stats.after_token_filter} "
        f"apy_cap_excl={excluded_by_apy_cap} min_tvl_excl={excluded_by_min_tvl} "
        f"returned={stats.returned}"
    )
    return candidates, stats


def select_safe_pools(snapshot: Iterable[Any]) -> List[PoolRecord]:
    """
    Aerodrome allow-list: top 5 Base Aerodrome pools by TVL.

    Gates: TVL > 0, age >= 7 days, no blacklisted token in the symbol.
    Never padded when fewer pools qualify.
    """
    safe = [
        score_pool(p)
        for p in normalize_snapshot(snapshot)
        if on_target_chain(p)
        and is_aerodrome(p)
        and p.tvl_usd > 0
        and p.age_days >= SAFE_POOL_MIN_AGE_DAYS
        and not contains_blacklisted_token(p.symbol)
    ]
    safe.sort(key=lambda p: p.tvl_usd, reverse=True)
    top = safe[:SAFE_POOL_LIMIT]
    logger.debug(f"[PoolSelector] {len(safe)} safe aerodrome pools, returning {len(top)}")
    return top
