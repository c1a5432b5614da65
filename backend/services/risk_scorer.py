"""
Pool Risk Scorer
Deterministic 1-100 risk score from APY, TVL, age and IL flag

Baseline 50, additive penalties, clamped:
- IL risk "yes":  +20
- APY tier:       +25 (>=100%), +15 (>=40%), +8 (>=20%), +2 otherwise
- TVL tier:       +10 (<$5M), +5 (<$20M)
- Age tier:       +10 (<30d), +5 (<90d)
"""

from dataclasses import replace

from services.pool_normalizer import PoolRecord

BASELINE_RISK = 50
MIN_RISK = 1
MAX_RISK = 100


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _il_penalty(il_risk: str) -> int:
    return 20 if il_risk.lower() == "yes" else 0


def _apy_penalty(apy: float) -> int:
    # Higher APY tends to be riskier, especially for small or new pools
    if apy >= 100:
        return 25
    if apy >= 40:
        return 15
    if apy >= 20:
        return 8
    return 2


def _tvl_penalty(tvl_usd: float) -> int:
    if tvl_usd < 5_000_000:
        return 10
    if tvl_usd < 20_000_000:
        return 5
    return 0


def _age_penalty(age_days: float) -> int:
    if age_days < 30:
        return 10
    if age_days < 90:
        return 5
    return 0


def compute_risk_score(pool: PoolRecord) -> int:
    risk = (
        BASELINE_RISK
        + _il_penalty(pool.il_risk)
        + _apy_penalty(pool.apy)
        + _tvl_penalty(pool.tvl_usd)
        + _age_penalty(pool.age_days)
    )
    return int(round(clamp(risk, MIN_RISK, MAX_RISK)))


def score_pool(pool: PoolRecord) -> PoolRecord:
    """Return a copy of the pool with risk_score filled in"""
    return replace(pool, risk_score=compute_risk_score(pool))
