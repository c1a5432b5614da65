"""
Strategy Review Router
Daily yield strategy reviews for Base (general + Aerodrome-only)

Each offering has three endpoints:
- /validate  -> check request requirements
- /payment   -> payment stub (always accepts)
- /          -> run the review and return the JSON deliverable
"""

import math
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from agents.strategy_agent import recommend
from config.policy import (
    RISKY_TOKEN_BLACKLIST,
    SAFE_POOL_MIN_AGE_DAYS,
    TARGET_CHAIN,
    RiskMode,
    Scope,
    TokenPreference,
    get_risk_limits,
)
from data_sources.defillama import DataSourceUnavailable, fetch_snapshot
from services.pool_selector import select_opportunities, select_safe_pools

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/strategy", tags=["Strategy"])

DATA_SOURCE = "defillama-yields"
HORIZON_DAYS = (7, 14, 30)
OUTPUT_MODES = ("user", "debug")
OPPORTUNITY_LIMIT = 10
USER_VIEW_TOP_POOLS = 3

Number = Union[float, str, None]


class BaseDailyReviewRequest(BaseModel):
    chain: Optional[str] = None
    budgetUSDC: Number = None
    maxLossPct: Number = None
    targetProfitPct: Number = None
    horizonDays: Number = None
    rebalanceCadence: Optional[str] = None
    riskMode: Optional[str] = None
    scope: Optional[str] = None
    tokenPreference: Optional[str] = None
    outputMode: Optional[str] = None
    notes: Optional[str] = None


class AerodromeDailyReviewRequest(BaseModel):
    chain: Optional[str] = None
    budgetUSDC: Number = None
    maxLossPct: Number = None
    targetProfitPct: Number = None
    horizonDays: Number = None
    rebalanceCadence: Optional[str] = None
    riskMode: Optional[str] = None
    poolSelection: Optional[str] = None
    notes: Optional[str] = None


# ============================================
# INPUT PARSING
# ============================================

def to_num(value: Any) -> Optional[float]:
    """Parse a number or numeric string, None if it isn't one"""
    if value is None or isinstance(value, bool):
        return None
    try:
        n = float(str(value).strip())
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def norm_str(value: Any, fallback: str) -> str:
    s = str(value if value is not None else "").strip()
    return s if s else fallback


def _validate_common(req) -> Optional[str]:
    """Shared gates, returns the failure reason or None"""
    chain = (req.chain or "").strip().lower()
    if not chain:
        return "Missing chain"
    if chain != TARGET_CHAIN:
        return "Only chain=base is supported in MVP"

    budget = to_num(req.budgetUSDC)
    dd = to_num(req.maxLossPct)
    tp = to_num(req.targetProfitPct)
    horizon = to_num(req.horizonDays)

    if budget is None or budget <= 0:
        return "budgetUSDC must be a positive number"
    if dd is None or dd <= 0 or dd > 50:
        return "maxLossPct must be between 0 and 50"
    if tp is None or tp <= 0 or tp > 200:
        return "targetProfitPct must be between 0 and 200"
    if horizon is None or horizon not in HORIZON_DAYS:
        return "horizonDays must be one of: 7, 14, 30"

    risk_mode = norm_str(req.riskMode, RiskMode.CONSERVATIVE.value).lower()
    if risk_mode not in [m.value for m in RiskMode]:
        return "riskMode must be one of: conservative, balanced"
    return None


def validate_base_review(req: BaseDailyReviewRequest) -> Tuple[bool, Optional[str]]:
    reason = _validate_common(req)
    if reason:
        return False, reason

    scope = norm_str(req.scope, Scope.ALL.value).lower()
    if scope not in [s.value for s in Scope]:
        return False, "scope must be one of: aerodrome, lending, all"

    token_preference = norm_str(req.tokenPreference, TokenPreference.USDC.value).upper()
    if token_preference not in [t.value for t in TokenPreference]:
        return False, "tokenPreference must be one of: USDC, ETH, mixed"

    output_mode = norm_str(req.outputMode, "user").lower()
    if output_mode not in OUTPUT_MODES:
        return False, "outputMode must be one of: user, debug"

    return True, None


def validate_aerodrome_review(req: AerodromeDailyReviewRequest) -> Tuple[bool, Optional[str]]:
    reason = _validate_common(req)
    if reason:
        return False, reason
    return True, None


def request_payment(_request: Any = None) -> str:
    return "Request accepted"


# ============================================
# DELIVERABLES
# ============================================

def _generated_at() -> str:
    return datetime.utcnow().isoformat() + "Z"


def build_allocation_suggestion(scope: Scope, risk_mode: RiskMode) -> Dict[str, int]:
    if scope == Scope.LENDING:
        return {"lending": 100}
    if scope == Scope.AERODROME:
        return {"aerodrome": 100}
    if risk_mode == RiskMode.CONSERVATIVE:
        return {"lending": 70, "aerodrome": 30}
    return {"lending": 50, "aerodrome": 50}


def _pool_summary(pool) -> Dict[str, Any]:
    return {
        "symbol": pool.symbol,
        "tvlUsd": pool.tvl_usd,
        "apy": pool.apy,
        "riskScore": pool.risk_score,
        "ilRisk": pool.il_risk,
    }


def build_base_review(req: BaseDailyReviewRequest, snapshot: List[Any]) -> Dict[str, Any]:
    """Run the engine over one snapshot and shape the v2 deliverable"""
    budget_usdc = to_num(req.budgetUSDC)
    max_loss_pct = to_num(req.maxLossPct)
    target_profit_pct = to_num(req.targetProfitPct)
    horizon_days = int(to_num(req.horizonDays))

    risk_mode = RiskMode(norm_str(req.riskMode, RiskMode.CONSERVATIVE.value).lower())
    scope = Scope(norm_str(req.scope, Scope.ALL.value).lower())
    token_preference = TokenPreference(norm_str(req.tokenPreference, TokenPreference.USDC.value).upper())
    output_mode = norm_str(req.outputMode, "user").lower()
    rebalance_cadence = norm_str(req.rebalanceCadence, "daily")

    limits = get_risk_limits(risk_mode)
    venues = [Scope.AERODROME.value, Scope.LENDING.value] if scope == Scope.ALL else [scope.value]

    opportunities, stats = select_opportunities(
        snapshot, scope=scope, token_preference=token_preference, limit=OPPORTUNITY_LIMIT
    )
    aerodrome_top5 = select_safe_pools(snapshot)
    recommendation = recommend(max_loss_pct, target_profit_pct, horizon_days, opportunities)

    chosen = recommendation.chosen_candidate
    user_view = {
        "action": recommendation.action.value,
        "why": list(recommendation.rationale),
        "chosen": {
            "venue": chosen.venue,
            "symbol": chosen.symbol,
            "apy": chosen.apy,
            "tvlUsd": chosen.tvl_usd,
            "riskScore": chosen.risk_score,
            "ilRisk": chosen.il_risk,
        } if chosen else None,
        "expectedPctInHorizon": recommendation.expected_pct_in_horizon,
        "topPools": [_pool_summary(p) for p in aerodrome_top5[:USER_VIEW_TOP_POOLS]],
        "guardrails": {
            "maxLossPct": max_loss_pct,
            "targetProfitPct": target_profit_pct,
            "horizonDays": horizon_days,
            "slippageMaxPct": limits.slippage_max_pct,
            "maxPctPerVenue": limits.max_pct_per_venue,
            "maxPctPerPool": limits.max_pct_per_pool,
            "rebalanceCadence": rebalance_cadence,
        },
    }

    deliverable = {
        "version": "v2",
        "chain": TARGET_CHAIN,
        "offering": "base_daily_yield_strategy_review",
        "dataSource": DATA_SOURCE,
        "generatedAt": _generated_at(),
        "inputs": {
            "budgetUSDC": budget_usdc,
            "maxLossPct": max_loss_pct,
            "targetProfitPct": target_profit_pct,
            "horizonDays": horizon_days,
            "riskMode": risk_mode.value,
            "scope": scope.value,
            "tokenPreference": token_preference.value,
            "rebalanceCadence": rebalance_cadence,
            "notes": req.notes or None,
            "outputMode": output_mode,
        },
        "userView": user_view,
    }
    if output_mode == "debug":
        deliverable["debugView"] = {
            "recommendedAction": recommendation.to_dict(),
            "liveOpportunities": [p.to_dict() for p in opportunities],
            "selectionStats": stats.to_dict(),
        }
    deliverable.update({
        "aerodromeTVLTop5Safe": [p.to_dict() for p in aerodrome_top5],
        "allocationTemplate": {
            "venues": venues,
            "maxPctPerVenue": limits.max_pct_per_venue,
            "maxPctPerPool": limits.max_pct_per_pool,
            "tokenPreference": token_preference.value,
            "suggestion": build_allocation_suggestion(scope, risk_mode),
        },
        "riskGates": {
            "maxDrawdownPct": max_loss_pct,
            "targetProfitPct": target_profit_pct,
            "slippageMaxPct": limits.slippage_max_pct,
            "rebalanceCadence": rebalance_cadence,
            "disallowLeverage": True,
        },
        "todayChecklist": [
            "Confirm Base network and sufficient ETH for gas.",
            "Review liveOpportunities and cap exposure by maxPctPerVenue/maxPctPerPool.",
            "Aerodrome entries must come from aerodromeTVLTop5Safe only.",
            "Record tx hashes and entry snapshot for tomorrow's review.",
            "If drawdown > maxLossPct: force REDUCE/EXIT decision next cycle.",
        ],
        "outputFormat": "json",
    })
    return deliverable


def build_aerodrome_review(req: AerodromeDailyReviewRequest, snapshot: List[Any]) -> Dict[str, Any]:
    """Recommendation over the Aerodrome safe top 5, v1 deliverable"""
    budget_usdc = to_num(req.budgetUSDC)
    max_loss_pct = to_num(req.maxLossPct)
    target_profit_pct = to_num(req.targetProfitPct)
    horizon_days = int(to_num(req.horizonDays))

    risk_mode = RiskMode(norm_str(req.riskMode, RiskMode.CONSERVATIVE.value).lower())
    pool_selection = norm_str(req.poolSelection, "tvl_top5_all")
    rebalance_cadence = norm_str(req.rebalanceCadence, "daily")
    limits = get_risk_limits(risk_mode)

    top5 = select_safe_pools(snapshot)
    recommendation = recommend(max_loss_pct, target_profit_pct, horizon_days, top5)

    return {
        "version": "v1",
        "protocol": "aerodrome",
        "chain": TARGET_CHAIN,
        "dataSource": DATA_SOURCE,
        "generatedAt": _generated_at(),
        "inputs": {
            "budgetUSDC": budget_usdc,
            "maxLossPct": max_loss_pct,
            "targetProfitPct": target_profit_pct,
            "horizonDays": horizon_days,
            "riskMode": risk_mode.value,
            "poolSelection": pool_selection,
            "rebalanceCadence": rebalance_cadence,
            "notes": req.notes or None,
        },
        "recommendation": recommendation.to_dict(),
        "top5PoolsByTVLSafe": [p.to_dict() for p in top5],
        "safetyFilters": {
            "minAgeDays": SAFE_POOL_MIN_AGE_DAYS,
            "blacklistApplied": True,
            "blacklistKeywords": list(RISKY_TOKEN_BLACKLIST),
        },
        "riskGates": {
            "maxDrawdownPct": max_loss_pct,
            "targetProfitPct": target_profit_pct,
            "slippageMaxPct": limits.slippage_max_pct,
            "positionMaxPctPerPool": limits.max_pct_per_pool,
            "rebalanceCadence": rebalance_cadence,
        },
        "todayChecklist": [
            "Confirm Base network and sufficient ETH for gas.",
            f"Use top5PoolsByTVLSafe only (age >={SAFE_POOL_MIN_AGE_DAYS}d and blacklist filter applied).",
            "If deploying: split budget across pools within positionMaxPctPerPool.",
            "Record entry snapshot (pool, amounts, txHash) for tomorrow's review.",
            "If DD breaches maxLossPct: switch to REDUCE/EXIT next cycle.",
        ],
        "outputFormat": "json",
    }


async def _load_snapshot() -> List[Any]:
    try:
        return await fetch_snapshot()
    except DataSourceUnavailable as e:
        logger.error(f"[StrategyRouter] {e}")
        raise HTTPException(status_code=503, detail=str(e))


# ============================================
# ENDPOINTS
# ============================================

@router.post("/base-daily-review/validate")
async def validate_base_daily_review(request: BaseDailyReviewRequest):
    valid, reason = validate_base_review(request)
    return {"valid": valid, "reason": reason}


@router.post("/base-daily-review/payment")
async def base_daily_review_payment(request: BaseDailyReviewRequest):
    return {"accepted": True, "message": request_payment(request)}


@router.post("/base-daily-review")
async def base_daily_review(request: BaseDailyReviewRequest):
    """
    Base daily yield strategy review.

    Filters Base pools by scope/token, ranks them, recommends
    HOLD / DEPLOY / REDUCE / EXIT and attaches the Aerodrome safe top 5.
    """
    valid, reason = validate_base_review(request)
    if not valid:
        raise HTTPException(status_code=400, detail=reason)

    snapshot = await _load_snapshot()
    return {"deliverable": {"type": "json", "value": build_base_review(request, snapshot)}}


@router.post("/aerodrome-daily-review/validate")
async def validate_aerodrome_daily_review(request: AerodromeDailyReviewRequest):
    valid, reason = validate_aerodrome_review(request)
    return {"valid": valid, "reason": reason}


@router.post("/aerodrome-daily-review/payment")
async def aerodrome_daily_review_payment(request: AerodromeDailyReviewRequest):
    return {"accepted": True, "message": request_payment(request)}


@router.post("/aerodrome-daily-review")
async def aerodrome_daily_review(request: AerodromeDailyReviewRequest):
    """Aerodrome-only review over the TVL top 5 safe pools"""
    valid, reason = validate_aerodrome_review(request)
    if not valid:
        raise HTTPException(status_code=400, detail=reason)

    snapshot = await _load_snapshot()
    return {"deliverable": {"type": "json", "value": build_aerodrome_review(request, snapshot)}}
