"""
Strategy Agent - Recommended Action
Maps drawdown tolerance, profit target and the top-ranked pool to one of
HOLD / DEPLOY / REDUCE / EXIT with an auditable rationale.

Decision list (first match wins):
1. No candidates                                  -> HOLD
2. DD gate <= 0.8% or top risk score >= 85        -> EXIT
3. DD gate <= 1.5%                                -> REDUCE
4. Expected % >= target and risk score <= 75      -> DEPLOY
5. Expected % >= target (risk too high)           -> HOLD
6. Otherwise                                      -> HOLD
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from services.pool_normalizer import PoolRecord
from services.risk_scorer import score_pool

logger = logging.getLogger(__name__)

EXIT_MAX_LOSS_PCT = 0.8
EXIT_RISK_SCORE = 85
REDUCE_MAX_LOSS_PCT = 1.5
DEPLOY_MAX_RISK_SCORE = 75
DAYS_PER_YEAR = 365


class RecommendedAction(str, Enum):
    HOLD = "HOLD"
    DEPLOY = "DEPLOY"
    REDUCE = "REDUCE"
    EXIT = "EXIT"


@dataclass(frozen=True)
class Recommendation:
    action: RecommendedAction
    rationale: Tuple[str, ...]
    chosen_candidate: Optional[PoolRecord] = None
    expected_pct_in_horizon: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "rationale": list(self.rationale),
            "chosenCandidate": self.chosen_candidate.to_dict() if self.chosen_candidate else None,
            "expectedPctInHorizon": self.expected_pct_in_horizon,
        }


@dataclass(frozen=True)
class DecisionContext:
    """Inputs seen by every guard in the decision table"""
    max_loss_pct: float
    target_profit_pct: float
    horizon_days: float
    top: PoolRecord
    expected_pct: float


def _num(value: float) -> str:
    return f"{value:g}"


# ============================================
# DECISION TABLE
# ============================================

def _is_guardrail_breach(ctx: DecisionContext) -> bool:
    return ctx.max_loss_pct <= EXIT_MAX_LOSS_PCT or ctx.top.risk_score >= EXIT_RISK_SCORE


def _exit(ctx: DecisionContext) -> Tuple[RecommendedAction, List[str]]:
    return RecommendedAction.EXIT, [
        f"Risk exceeds conservative guardrails (DD gate {_num(ctx.max_loss_pct)}% "
        f"<= {_num(EXIT_MAX_LOSS_PCT)}% or risk score >= {EXIT_RISK_SCORE}).",
        f"Top risk score: {ctx.top.risk_score}/100.",
    ]


def _is_tight_drawdown(ctx: DecisionContext) -> bool:
    return ctx.max_loss_pct <= REDUCE_MAX_LOSS_PCT


def _reduce(ctx: DecisionContext) -> Tuple[RecommendedAction, List[str]]:
    return RecommendedAction.REDUCE, [
        f"Tight DD gate ({_num(ctx.max_loss_pct)}%) suggests de-risking over fresh deployment.",
        f"Top opportunity risk score is {ctx.top.risk_score}/100.",
    ]


def _meets_target(ctx: DecisionContext) -> bool:
    return ctx.expected_pct >= ctx.target_profit_pct


def _is_deployable(ctx: DecisionContext) -> bool:
    return _meets_target(ctx) and ctx.top.risk_score <= DEPLOY_MAX_RISK_SCORE


def _deploy(ctx: DecisionContext) -> Tuple[RecommendedAction, List[str]]:
    return RecommendedAction.DEPLOY, [
        f"Top APY implies ~{ctx.expected_pct:.2f}% over {_num(ctx.horizon_days)}d "
        f"(target {_num(ctx.target_profit_pct)}%).",
        f"Risk score {ctx.top.risk_score}/100 is within the deployment threshold "
        f"({DEPLOY_MAX_RISK_SCORE}).",
    ]


def _hold_too_risky(ctx: DecisionContext) -> Tuple[RecommendedAction, List[str]]:
    return RecommendedAction.HOLD, [
        f"Top APY meets TP gate (~{ctx.expected_pct:.2f}% over {_num(ctx.horizon_days)}d), "
        f"but risk score {ctx.top.risk_score}/100 is too high for deployment.",
        "Wait for safer conditions or choose a lower-risk venue/pool.",
    ]


def _hold_below_target(ctx: DecisionContext) -> Tuple[RecommendedAction, List[str]]:
    return RecommendedAction.HOLD, [
        f"Top APY implies ~{ctx.expected_pct:.2f}% over {_num(ctx.horizon_days)}d, "
        f"below TP gate ({_num(ctx.target_profit_pct)}%).",
        "Wait for better risk-adjusted entry.",
    ]


DecisionRule = Tuple[
    Callable[[DecisionContext], bool],
    Callable[[DecisionContext], Tuple[RecommendedAction, List[str]]],
]

DECISION_TABLE: Tuple[DecisionRule, ...] = (
    (_is_guardrail_breach, _exit),
    (_is_tight_drawdown, _reduce),
    (_is_deployable, _deploy),
    (_meets_target, _hold_too_risky),
    (lambda ctx: True, _hold_below_target),
)

NO_CANDIDATES_RATIONALE = "No eligible opportunities passed the safety and liquidity filters."


def recommend(
    max_loss_pct: float,
    target_profit_pct: float,
    horizon_days: float,
    candidates: Sequence[PoolRecord],
) -> Recommendation:
    """
    Choose the recommended action for the top-ranked candidate.

    Args:
        max_loss_pct: drawdown tolerance, percent
        target_profit_pct: profit target over the horizon, percent
        horizon_days: projection window (7, 14 or 30)
        candidates: ranked, risk-scored pools; only the first is used
    """
    if not candidates:
        logger.info("[StrategyAgent] HOLD: no candidates")
        return Recommendation(
            action=RecommendedAction.HOLD,
            rationale=(NO_CANDIDATES_RATIONALE,),
        )

    top = candidates[0]
    if top.risk_score is None:
        top = score_pool(top)

    ctx = DecisionContext(
        max_loss_pct=max_loss_pct,
        target_profit_pct=target_profit_pct,
        horizon_days=horizon_days,
        top=top,
        expected_pct=top.apy * horizon_days / DAYS_PER_YEAR,
    )

    for predicate, build in DECISION_TABLE:
        if predicate(ctx):
            action, rationale = build(ctx)
            break

    logger.info(
        f"[StrategyAgent] {action.value}: {top.symbol} risk={top.risk_score} "
        f"expected={ctx.expected_pct:.2f}% target={_num(target_profit_pct)}% dd={_num(max_loss_pct)}%"
    )
    return Recommendation(
        action=action,
        rationale=tuple(rationale),
        chosen_candidate=top,
        expected_pct_in_horizon=ctx.expected_pct,
    )
