"""Engagement resolution rules.

:func:`resolve_combat` is a pure function of two units and the environment
plus two bounded random draws (one per casualty computation).  Applying the
outcome is a separate step, :func:`apply_combat_results`, which the
simulation loop calls once per resolved engagement.
"""

from __future__ import annotations

import math

from tacsim.domain.enums import (
    Affiliation,
    CombatWinner,
    TerrainType,
    TimeOfDay,
    UnitStatus,
    Weather,
)
from tacsim.domain.models import CombatResult, Unit
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig
from tacsim.utils.geometry import clamp, is_in_frontal_arc, is_in_range
from tacsim.utils.rng import RandomSource

OPPOSING_SIDES: dict[Affiliation, Affiliation] = {
    Affiliation.FRIENDLY: Affiliation.ENEMY,
    Affiliation.ENEMY: Affiliation.FRIENDLY,
}


def opposing_affiliation(side: Affiliation) -> Affiliation | None:
    """Return the hostile side of ``side``; neutral and unknown have none."""

    return OPPOSING_SIDES.get(side)


def resolve_combat(
    attacker: Unit,
    defender: Unit,
    terrain: TerrainType,
    weather: Weather,
    time_of_day: TimeOfDay,
    *,
    rng: RandomSource,
    rules: RulesConfig = DEFAULT_RULES,
) -> CombatResult:
    """Compute the outcome of one engagement without mutating either unit."""

    cr = rules.combat
    attack_power = attacker.firepower * attacker.count * (attacker.ammunition / 100)
    defense_power = defender.armor * defender.count

    terrain_mod = rules.terrain_modifiers[terrain]
    attack_power *= terrain_mod.attack
    defense_power *= terrain_mod.defense

    attack_power *= rules.weather_effects[weather].combat_multiplier
    attack_power *= rules.time_of_day_visibility[time_of_day]

    attack_power *= attacker.morale / 100
    defense_power *= defender.morale / 100

    if _has_high_ground(attacker, defender, rules):
        defense_power *= cr.high_ground_defense_multiplier

    flank = is_flank_attack(attacker, defender, rules=rules)
    if flank:
        attack_power *= cr.flank_attack_multiplier
        defense_power *= cr.flank_defense_multiplier

    attacker_losses = calculate_losses(defense_power, attacker.count, attacker.armor, rng, rules)
    defender_losses = calculate_losses(attack_power, defender.count, defender.armor, rng, rules)

    winner = determine_winner(attack_power, defense_power, attacker_losses, defender_losses, rules)
    morale_damage = calculate_morale_damage(
        winner, attacker_losses, defender_losses, attacker, defender, rules
    )

    return CombatResult(
        attacker_losses=attacker_losses,
        defender_losses=defender_losses,
        winner=winner,
        morale_damage=morale_damage,
        ammunition_used=math.floor(attacker.count * cr.ammunition_rate),
        duration=cr.engagement_duration,
        casualty_ratio=defender_losses / (attacker_losses + 1),
        attack_power=attack_power,
        defense_power=defense_power,
        flank_attack=flank,
    )


def _has_high_ground(attacker: Unit, defender: Unit, rules: RulesConfig) -> bool:
    attacker_elevation = attacker.position.elevation or 0.0
    defender_elevation = defender.position.elevation or 0.0
    return defender_elevation - attacker_elevation > rules.combat.high_ground_margin


def is_flank_attack(attacker: Unit, defender: Unit, *, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """True when the attack arrives outside the defender's frontal arc."""

    return not is_in_frontal_arc(
        defender.position, defender.facing, attacker.position, rules.combat.flank_angle
    )


def calculate_losses(
    enemy_power: float,
    unit_count: int,
    armor: float,
    rng: RandomSource,
    rules: RulesConfig = DEFAULT_RULES,
) -> int:
    """Casualties inflicted on a unit by ``enemy_power``, capped at its count."""

    cr = rules.combat
    random_factor = rng.uniform(cr.random_factor_min, cr.random_factor_max)
    if armor <= 0:
        return unit_count if enemy_power > 0 else 0
    base_rate = enemy_power / (armor * cr.loss_armor_scale)
    losses = math.floor(unit_count * base_rate * random_factor)
    return max(0, min(losses, unit_count))


def determine_winner(
    attack_power: float,
    defense_power: float,
    attacker_losses: int,
    defender_losses: int,
    rules: RulesConfig = DEFAULT_RULES,
) -> CombatWinner:
    power_ratio = attack_power / (defense_power + 1)
    loss_ratio = defender_losses / (attacker_losses + 1)
    score = power_ratio * loss_ratio

    if score > rules.combat.attacker_win_score:
        return CombatWinner.ATTACKER
    if score < rules.combat.defender_win_score:
        return CombatWinner.DEFENDER
    return CombatWinner.DRAW


def calculate_morale_damage(
    winner: CombatWinner,
    attacker_losses: int,
    defender_losses: int,
    attacker: Unit,
    defender: Unit,
    rules: RulesConfig = DEFAULT_RULES,
) -> float:
    cr = rules.combat
    damage = cr.base_morale_damage

    if winner == CombatWinner.ATTACKER:
        damage += attacker_losses * cr.loss_morale_factor
    elif winner == CombatWinner.DEFENDER:
        damage += defender_losses * cr.loss_morale_factor
    else:
        damage += cr.draw_morale_damage

    if attacker.max_count and attacker_losses / attacker.max_count > cr.heavy_casualty_rate:
        damage += cr.heavy_casualty_morale_damage
    if defender.max_count and defender_losses / defender.max_count > cr.heavy_casualty_rate:
        damage += cr.heavy_casualty_morale_damage

    return min(damage, cr.max_morale_damage)


def apply_combat_results(
    attacker: Unit,
    defender: Unit,
    result: CombatResult,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> None:
    """Mutate both units with the outcome of an engagement."""

    cr = rules.combat
    if result.winner == CombatWinner.ATTACKER:
        attacker_morale_loss = result.morale_damage * cr.winner_morale_share
        defender_morale_loss = result.morale_damage
    elif result.winner == CombatWinner.DEFENDER:
        attacker_morale_loss = result.morale_damage
        defender_morale_loss = result.morale_damage * cr.winner_morale_share
    else:
        attacker_morale_loss = defender_morale_loss = result.morale_damage

    if not attacker.is_destroyed:
        attacker.count = max(0, attacker.count - result.attacker_losses)
        attacker.morale = clamp(attacker.morale - attacker_morale_loss, 0.0, 100.0)
        attacker.ammunition = clamp(attacker.ammunition - result.ammunition_used, 0.0, 100.0)
        _update_status(attacker, rules, can_be_pinned=False)

    if not defender.is_destroyed:
        defender.count = max(0, defender.count - result.defender_losses)
        defender.morale = clamp(defender.morale - defender_morale_loss, 0.0, 100.0)
        _update_status(defender, rules, can_be_pinned=True)


def _update_status(unit: Unit, rules: RulesConfig, *, can_be_pinned: bool) -> None:
    if unit.count == 0:
        unit.status = UnitStatus.DESTROYED
        unit.destination = None
    elif unit.morale < rules.combat.retreat_morale:
        unit.status = UnitStatus.RETREATING
    elif can_be_pinned and unit.morale < rules.combat.pinned_morale:
        unit.status = UnitStatus.PINNED


def can_engage(unit: Unit, target: Unit) -> bool:
    """Whether ``unit`` may open fire on ``target`` this tick."""

    if unit.is_destroyed or target.is_destroyed:
        return False
    if not is_in_range(unit.position, target.position, unit.weapon_range):
        return False
    if unit.ammunition <= 0:
        return False
    return opposing_affiliation(unit.affiliation) == target.affiliation


def calculate_suppression(attacker: Unit, defender: Unit, *, rules: RulesConfig = DEFAULT_RULES) -> float:
    """Effectiveness reduction (percent) suppressive fire imposes on ``defender``.

    Suppression causes no casualties; it is capped at 50 %.
    """

    if defender.count <= 0:
        return 0.0
    suppression_power = attacker.firepower * (attacker.count / defender.count)
    return min(rules.combat.max_suppression, suppression_power * rules.combat.suppression_scale)
