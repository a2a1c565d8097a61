"""Situational assessment of the battlefield for one side."""

from __future__ import annotations

from collections.abc import Sequence

from tacsim.domain.combat import opposing_affiliation
from tacsim.domain.enums import Affiliation
from tacsim.domain.models import TacticalAssessment, Unit, WorldState
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig
from tacsim.utils.geometry import distance


def assess(
    world: WorldState,
    side: Affiliation,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> TacticalAssessment:
    """Summarise the battlefield from ``side``'s point of view (read-only)."""

    ar = rules.assessment
    enemy_side = opposing_affiliation(side)
    own_units = world.units_of(side, active_only=True)
    enemy_units = world.units_of(enemy_side, active_only=True) if enemy_side else []

    own_strength = _strength(own_units)
    enemy_strength = _strength(enemy_units)
    force_ratio = own_strength / (enemy_strength + 1)

    objectives = list(world.objectives.values())
    objectives_held = sum(1 for obj in objectives if obj.controlled_by == side)

    avg_ammo = _mean([unit.ammunition for unit in own_units])
    avg_fuel = _mean([unit.fuel for unit in own_units])
    avg_morale = _mean([unit.morale for unit in own_units])

    confidence = min(
        ar.max_confidence,
        force_ratio * ar.confidence_ratio_weight
        + avg_ammo * ar.confidence_ammo_weight
        + avg_morale * ar.confidence_morale_weight,
    )

    return TacticalAssessment(
        force_ratio=force_ratio,
        objectives_held=objectives_held,
        objectives_total=len(objectives),
        avg_ammo=avg_ammo,
        avg_fuel=avg_fuel,
        avg_morale=avg_morale,
        enemy_flank_exposed=is_flank_exposed(enemy_units, rules=rules),
        isolated_enemy_unit=find_isolated_unit(enemy_units, rules=rules),
        confidence=confidence,
    )


def _strength(units: Sequence[Unit]) -> float:
    return sum(unit.count * unit.firepower for unit in units)


def _mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def is_flank_exposed(units: Sequence[Unit], *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """A line stretched wider than the spread threshold exposes its flanks."""

    if len(units) < rules.assessment.flank_min_units:
        return False
    xs = [unit.position.x for unit in units]
    return max(xs) - min(xs) > rules.assessment.flank_spread


def find_isolated_unit(
    units: Sequence[Unit],
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Unit | None:
    """Return the first unit with no ally inside the isolation radius."""

    radius = rules.assessment.isolation_radius
    for unit in units:
        has_neighbour = any(
            other.id != unit.id and distance(other.position, unit.position) < radius
            for other in units
        )
        if not has_neighbour:
            return unit
    return None
