"""Strategy selection from a tactical assessment."""

from __future__ import annotations

from dataclasses import dataclass

from tacsim.domain.enums import StrategyType
from tacsim.domain.models import TacticalAssessment
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig

STRATEGY_DESCRIPTIONS: dict[StrategyType, str] = {
    StrategyType.AGGRESSIVE_ASSAULT: "Overwhelming force - full assault on all fronts",
    StrategyType.FLANKING_MANEUVER: "Enemy flank exposed - execute double envelopment",
    StrategyType.METHODICAL_ATTACK: "Gradual advance with fire support",
    StrategyType.DEFENSIVE_POSTURE: "Hold ground and wait for opportunity",
    StrategyType.FOCUS_FIRE: "Concentrate fire on isolated enemy units",
    StrategyType.TACTICAL_RETREAT: "Withdraw and regroup",
    StrategyType.HOLD_GROUND: "Maintain current positions",
}


@dataclass(frozen=True, slots=True)
class Strategy:
    """Behaviour mode chosen by the AI for the next planning cycle."""

    type: StrategyType
    description: str

    @classmethod
    def of(cls, strategy_type: StrategyType) -> Strategy:
        return cls(strategy_type, STRATEGY_DESCRIPTIONS[strategy_type])


def select_strategy(
    assessment: TacticalAssessment,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Strategy:
    """Map an assessment to a strategy.

    Rules are evaluated in order and the first match wins; the ratio bands
    overlap, so the order is significant.
    """

    sr = rules.strategy
    ratio = assessment.force_ratio

    if ratio > sr.assault_ratio and assessment.avg_ammo > sr.assault_min_ammo:
        return Strategy.of(StrategyType.AGGRESSIVE_ASSAULT)
    if ratio > sr.flanking_ratio and assessment.enemy_flank_exposed:
        return Strategy.of(StrategyType.FLANKING_MANEUVER)
    if sr.methodical_min_ratio < ratio < sr.methodical_max_ratio:
        return Strategy.of(StrategyType.METHODICAL_ATTACK)
    if sr.defensive_min_ratio <= ratio <= sr.defensive_max_ratio:
        return Strategy.of(StrategyType.DEFENSIVE_POSTURE)
    if ratio < sr.focus_fire_ratio and assessment.isolated_enemy_unit is not None:
        return Strategy.of(StrategyType.FOCUS_FIRE)
    if (
        ratio < sr.retreat_ratio
        or assessment.avg_ammo < sr.retreat_ammo
        or assessment.avg_morale < sr.retreat_morale
    ):
        return Strategy.of(StrategyType.TACTICAL_RETREAT)
    return Strategy.of(StrategyType.HOLD_GROUND)
