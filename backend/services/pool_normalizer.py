"""
Pool Normalizer
Turns loosely-typed DefiLlama pool rows into canonical PoolRecord values

Missing or garbage fields never reject a pool:
- numbers fall back to 0
- strings fall back to "unknown" ("UNKNOWN" for symbols)
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from config.policy import AERODROME_KEYWORD

UNKNOWN = "unknown"
UNKNOWN_SYMBOL = "UNKNOWN"


@dataclass(frozen=True)
class PoolRecord:
    """Canonical pool shape used by every selection stage"""
    venue: str
    pool_id: str
    symbol: str
    apy: float
    tvl_usd: float
    age_days: float
    il_risk: str
    chain: str = UNKNOWN
    project: str = UNKNOWN
    risk_score: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "venue": self.venue,
            "poolId": self.pool_id,
            "symbol": self.symbol,
            "apy": self.apy,
            "tvlUsd": self.tvl_usd,
            "riskScore": self.risk_score,
            "ageDays": self.age_days,
            "ilRisk": self.il_risk,
        }


def to_number(value: Any) -> float:
    """Coerce to a finite float or 0.0"""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_text(value: Any, fallback: str = UNKNOWN) -> str:
    if value is None:
        return fallback
    return str(value)


def to_venue(project: str) -> str:
    p = project.lower()
    if AERODROME_KEYWORD in p:
        return AERODROME_KEYWORD
    return p


def normalize_pool(raw: Any) -> PoolRecord:
    """Build a PoolRecord from any raw row. Never raises."""
    if not isinstance(raw, dict):
        raw = {}

    project = to_text(raw.get("project"))
    return PoolRecord(
        venue=to_venue(project),
        pool_id=to_text(raw.get("pool")),
        symbol=to_text(raw.get("symbol"), UNKNOWN_SYMBOL),
        apy=to_number(raw.get("apy")),
        tvl_usd=to_number(raw.get("tvlUsd")),
        age_days=to_number(raw.get("count")),
        il_risk=to_text(raw.get("ilRisk")),
        chain=to_text(raw.get("chain")),
        project=project,
    )


def normalize_snapshot(snapshot: Iterable[Any]) -> List[PoolRecord]:
    return [normalize_pool(raw) for raw in snapshot]
