# Config package
from config.policy import (
    APY_CAP_PCT,
    MIN_TVL_USD,
    LENDING_PROJECTS,
    RISKY_TOKEN_BLACKLIST,
    SAFE_POOL_LIMIT,
    SAFE_POOL_MIN_AGE_DAYS,
    TARGET_CHAIN,
    RiskLimits,
    RiskMode,
    Scope,
    TokenPreference,
    get_risk_limits,
    parse_risk_mode,
)
