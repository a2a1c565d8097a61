"""Expansion of a strategy into concrete per-unit orders."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

from tacsim.domain.combat import opposing_affiliation
from tacsim.domain.enums import Affiliation, CommandType, StrategyType
from tacsim.domain.models import (
    Objective,
    Order,
    OrderID,
    OrderTarget,
    Position,
    TacticalAssessment,
    Unit,
    WorldState,
)
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig
from tacsim.domain.strategy import Strategy
from tacsim.utils.geometry import centroid, distance

OrderIdSource = Callable[[], OrderID]


def generate_orders(
    strategy: Strategy,
    world: WorldState,
    assessment: TacticalAssessment,
    side: Affiliation,
    *,
    next_order_id: OrderIdSource,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[Order]:
    """Build one order per active unit of ``side`` for the chosen strategy."""

    orules = rules.orders
    enemy_side = opposing_affiliation(side)
    own_units = world.units_of(side, active_only=True)
    enemy_units = world.units_of(enemy_side, active_only=True) if enemy_side else []
    objectives = list(world.objectives.values())

    def issue(unit: Unit, command: CommandType, target: OrderTarget | None, priority: int) -> Order:
        return Order(
            id=next_order_id(),
            unit_id=unit.id,
            command=command,
            target=target,
            priority=priority,
            issued_at=world.elapsed_time,
        )

    match strategy.type:
        case StrategyType.AGGRESSIVE_ASSAULT | StrategyType.METHODICAL_ATTACK:
            priority = (
                orules.assault_priority
                if strategy.type == StrategyType.AGGRESSIVE_ASSAULT
                else orules.methodical_priority
            )
            return [
                issue(
                    unit,
                    CommandType.ATTACK,
                    find_nearest_target(unit, enemy_units, objectives, side),
                    priority,
                )
                for unit in own_units
            ]

        case StrategyType.FLANKING_MANEUVER:
            split = math.floor(len(own_units) * orules.frontal_share)
            center = enemy_center(enemy_units, rules=rules)
            flank_point = Position(x=center.x + orules.flank_offset, y=center.y)
            orders = [
                issue(unit, CommandType.ATTACK, _copy(center), orules.frontal_priority)
                for unit in own_units[:split]
            ]
            orders.extend(
                issue(unit, CommandType.FLANK, _copy(flank_point), orules.flanking_priority)
                for unit in own_units[split:]
            )
            return orders

        case StrategyType.DEFENSIVE_POSTURE:
            orders = []
            for unit in own_units:
                objective = find_nearest_objective(unit, objectives)
                if objective is None:
                    orders.append(issue(unit, CommandType.HOLD, None, orules.defensive_priority))
                else:
                    orders.append(
                        issue(
                            unit,
                            CommandType.DEFEND,
                            _copy(objective.position),
                            orules.defensive_priority,
                        )
                    )
            return orders

        case StrategyType.TACTICAL_RETREAT:
            rally = rally_point(own_units, rules=rules)
            return [
                issue(unit, CommandType.RETREAT, _copy(rally), orules.retreat_priority)
                for unit in own_units
            ]

        case StrategyType.FOCUS_FIRE:
            isolated = assessment.isolated_enemy_unit
            if isolated is None:
                return []
            return [
                issue(unit, CommandType.ATTACK, _copy(isolated.position), orules.focus_fire_priority)
                for unit in own_units
            ]

        case _:
            return [issue(unit, CommandType.HOLD, None, orules.hold_priority) for unit in own_units]


def _copy(position: Position) -> Position:
    return Position(x=position.x, y=position.y)


def find_nearest_target(
    unit: Unit,
    enemies: Sequence[Unit],
    objectives: Sequence[Objective],
    side: Affiliation,
) -> Position:
    """Nearest active enemy or objective not already held by ``side``.

    Falls back to the unit's own position when nothing qualifies.
    """

    nearest = unit.position
    nearest_dist = math.inf
    for enemy in enemies:
        if enemy.is_destroyed:
            continue
        dist = distance(unit.position, enemy.position)
        if dist < nearest_dist:
            nearest, nearest_dist = enemy.position, dist
    for objective in objectives:
        if objective.controlled_by == side:
            continue
        dist = distance(unit.position, objective.position)
        if dist < nearest_dist:
            nearest, nearest_dist = objective.position, dist
    return _copy(nearest)


def find_nearest_objective(unit: Unit, objectives: Sequence[Objective]) -> Objective | None:
    if not objectives:
        return None
    return min(objectives, key=lambda obj: distance(unit.position, obj.position))


def enemy_center(enemies: Sequence[Unit], *, rules: RulesConfig = DEFAULT_RULES) -> Position:
    center = centroid(unit.position for unit in enemies)
    if center is None:
        return Position(x=rules.orders.map_center_x, y=rules.orders.map_center_y)
    return center


def rally_point(own_units: Sequence[Unit], *, rules: RulesConfig = DEFAULT_RULES) -> Position:
    """Rally point behind the own-side centroid, never closer than the map edge margin."""

    orules = rules.orders
    center = centroid(unit.position for unit in own_units)
    if center is None:
        return Position(x=orules.default_rally_x, y=orules.rally_y)
    return Position(x=max(orules.rally_min_x, center.x - orules.rally_distance), y=orules.rally_y)
