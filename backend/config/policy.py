"""
Strategy Policy Configuration
Static guardrails for the Base yield strategy review
Override the numeric caps through env vars, everything else is fixed
"""

import os
from dataclasses import dataclass
from enum import Enum

from dotenv import load_dotenv
load_dotenv()


class RiskMode(str, Enum):
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"


class Scope(str, Enum):
    AERODROME = "aerodrome"
    LENDING = "lending"
    ALL = "all"


class TokenPreference(str, Enum):
    USDC = "USDC"
    ETH = "ETH"
    MIXED = "MIXED"


# ============================================
# CHAIN / VENUES
# ============================================

TARGET_CHAIN = "base"

AERODROME_KEYWORD = "aerodrome"

# DefiLlama project slugs treated as lending venues
LENDING_PROJECTS = frozenset({
    "aave-v3",
    "morpho-blue",
    "moonwell",
})

# ============================================
# SAFETY BOUNDS
# ============================================

APY_CAP_PCT = float(os.getenv("POLICY_APY_CAP_PCT", "100"))
MIN_TVL_USD = float(os.getenv("POLICY_MIN_TVL_USD", "1000000"))

SAFE_POOL_MIN_AGE_DAYS = 7
SAFE_POOL_LIMIT = 5

# Upper-case substrings of rebasing, depegged or exploited tokens
RISKY_TOKEN_BLACKLIST = (
    "AMPL",
    "OHM",
    "UST",
    "LUNA",
    "USDX",
    "DEUSD",
)

# ============================================
# POSITION / SLIPPAGE CAPS (per risk mode)
# ============================================

SLIPPAGE_MAX_PCT = {
    RiskMode.CONSERVATIVE: 0.3,
    RiskMode.BALANCED: 0.5,
}

POSITION_MAX_PCT_PER_VENUE = {
    RiskMode.CONSERVATIVE: 40,
    RiskMode.BALANCED: 60,
}

POSITION_MAX_PCT_PER_POOL = {
    RiskMode.CONSERVATIVE: 20,
    RiskMode.BALANCED: 30,
}


@dataclass(frozen=True)
class RiskLimits:
    """Slippage and sizing caps for one risk mode"""
    risk_mode: RiskMode
    slippage_max_pct: float
    max_pct_per_venue: float
    max_pct_per_pool: float


def parse_risk_mode(value) -> RiskMode:
    """Map a loose value to a RiskMode, anything unknown is conservative"""
    if isinstance(value, RiskMode):
        return value
    try:
        return RiskMode(str(value or "").strip().lower())
    except ValueError:
        return RiskMode.CONSERVATIVE


def get_risk_limits(risk_mode=RiskMode.CONSERVATIVE) -> RiskLimits:
    mode = parse_risk_mode(risk_mode)
    return RiskLimits(
        risk_mode=mode,
        slippage_max_pct=SLIPPAGE_MAX_PCT[mode],
        max_pct_per_venue=POSITION_MAX_PCT_PER_VENUE[mode],
        max_pct_per_pool=POSITION_MAX_PCT_PER_POOL[mode],
    )
