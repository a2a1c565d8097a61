"""Declarative rule configuration for the tactical simulation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from .enums import TerrainType, TimeOfDay, UnitCategory, Weather


@dataclass(frozen=True, slots=True)
class TerrainModifiers:
    """Combat and movement multipliers of one terrain type."""

    attack: float
    defense: float
    movement: float
    visibility: float


@dataclass(frozen=True, slots=True)
class WeatherEffects:
    """Multipliers a weather condition applies."""

    visibility_multiplier: float
    movement_multiplier: float
    combat_multiplier: float


@dataclass(frozen=True, slots=True)
class UnitTemplate:
    """Baseline statistics of a unit category."""

    speed: float
    firepower: float
    armor: float
    detection_range: float
    weapon_range: float
    count: int


TERRAIN_MODIFIERS: Mapping[TerrainType, TerrainModifiers] = MappingProxyType(
    {
        TerrainType.OPEN: TerrainModifiers(attack=1.3, defense=0.8, movement=1.0, visibility=1.0),
        TerrainType.FOREST: TerrainModifiers(attack=0.7, defense=1.3, movement=0.6, visibility=0.5),
        TerrainType.URBAN: TerrainModifiers(attack=0.6, defense=1.6, movement=0.5, visibility=0.4),
        TerrainType.HILL: TerrainModifiers(attack=0.9, defense=1.4, movement=0.7, visibility=1.2),
        TerrainType.WATER: TerrainModifiers(attack=0.0, defense=0.0, movement=0.0, visibility=1.0),
        TerrainType.ROAD: TerrainModifiers(attack=1.0, defense=0.7, movement=1.5, visibility=1.0),
        TerrainType.MOUNTAIN: TerrainModifiers(attack=0.5, defense=2.0, movement=0.3, visibility=1.5),
        TerrainType.SWAMP: TerrainModifiers(attack=0.8, defense=1.0, movement=0.3, visibility=0.7),
    }
)

WEATHER_EFFECTS: Mapping[Weather, WeatherEffects] = MappingProxyType(
    {
        Weather.CLEAR: WeatherEffects(1.0, 1.0, 1.0),
        Weather.RAIN: WeatherEffects(0.7, 0.8, 0.8),
        Weather.FOG: WeatherEffects(0.3, 0.9, 0.6),
        Weather.SNOW: WeatherEffects(0.5, 0.6, 0.7),
        Weather.STORM: WeatherEffects(0.4, 0.7, 0.5),
    }
)

TIME_OF_DAY_VISIBILITY: Mapping[TimeOfDay, float] = MappingProxyType(
    {
        TimeOfDay.DAY: 1.0,
        TimeOfDay.DAWN: 0.7,
        TimeOfDay.DUSK: 0.7,
        TimeOfDay.NIGHT: 0.3,
    }
)

UNIT_TEMPLATES: Mapping[UnitCategory, UnitTemplate] = MappingProxyType(
    {
        UnitCategory.INFANTRY: UnitTemplate(5, 3, 1, 400, 400, 30),
        UnitCategory.MECHANIZED_INFANTRY: UnitTemplate(40, 5, 3, 600, 600, 30),
        UnitCategory.ARMOR: UnitTemplate(50, 10, 10, 2000, 2000, 4),
        UnitCategory.ARTILLERY: UnitTemplate(30, 15, 2, 15000, 15000, 6),
        UnitCategory.RECON: UnitTemplate(70, 2, 2, 3000, 3000, 2),
        UnitCategory.ENGINEER: UnitTemplate(35, 2, 2, 500, 300, 20),
        UnitCategory.AVIATION: UnitTemplate(200, 12, 3, 5000, 4000, 2),
        UnitCategory.LOGISTICS: UnitTemplate(40, 1, 1, 500, 100, 10),
        UnitCategory.MEDICAL: UnitTemplate(40, 0, 1, 500, 0, 8),
        UnitCategory.COMMAND: UnitTemplate(40, 2, 2, 1000, 500, 15),
    }
)


@dataclass(frozen=True, slots=True)
class CombatRules:
    """Constants of the engagement model."""

    high_ground_margin: float = 10.0
    high_ground_defense_multiplier: float = 1.3
    flank_angle: float = 90.0
    flank_attack_multiplier: float = 1.4
    flank_defense_multiplier: float = 0.7
    loss_armor_scale: float = 100.0
    random_factor_min: float = 0.8
    random_factor_max: float = 1.2
    attacker_win_score: float = 1.5
    defender_win_score: float = 0.7
    base_morale_damage: float = 10.0
    loss_morale_factor: float = 0.5
    draw_morale_damage: float = 15.0
    heavy_casualty_rate: float = 0.25
    heavy_casualty_morale_damage: float = 15.0
    max_morale_damage: float = 40.0
    winner_morale_share: float = 0.5
    ammunition_rate: float = 0.05
    engagement_duration: float = 60.0
    retreat_morale: float = 30.0
    pinned_morale: float = 50.0
    max_suppression: float = 50.0
    suppression_scale: float = 5.0
    suppressed_threshold: float = 25.0


@dataclass(frozen=True, slots=True)
class AssessmentRules:
    """Thresholds used when summarising the battlefield."""

    flank_spread: float = 400.0
    flank_min_units: int = 3
    isolation_radius: float = 200.0
    confidence_ratio_weight: float = 30.0
    confidence_ammo_weight: float = 0.3
    confidence_morale_weight: float = 0.4
    max_confidence: float = 100.0


@dataclass(frozen=True, slots=True)
class StrategyRules:
    """Ordered thresholds of the strategy selector."""

    assault_ratio: float = 2.0
    assault_min_ammo: float = 60.0
    flanking_ratio: float = 1.3
    methodical_min_ratio: float = 1.0
    methodical_max_ratio: float = 1.5
    defensive_min_ratio: float = 0.8
    defensive_max_ratio: float = 1.2
    focus_fire_ratio: float = 0.8
    retreat_ratio: float = 0.6
    retreat_ammo: float = 30.0
    retreat_morale: float = 40.0


@dataclass(frozen=True, slots=True)
class OrderRules:
    """Geometry and priorities of generated orders."""

    frontal_share: float = 0.6
    flank_offset: float = 300.0
    rally_distance: float = 200.0
    rally_min_x: float = 50.0
    rally_y: float = 400.0
    map_center_x: float = 600.0
    map_center_y: float = 400.0
    default_rally_x: float = 100.0
    assault_priority: int = 1
    methodical_priority: int = 2
    frontal_priority: int = 2
    flanking_priority: int = 1
    defensive_priority: int = 3
    retreat_priority: int = 1
    focus_fire_priority: int = 1
    hold_priority: int = 4


@dataclass(frozen=True, slots=True)
class MovementRules:
    """Movement conversion and consumption."""

    arrival_threshold: float = 5.0
    speed_scale: float = 0.27  # km/h to map units per second
    fuel_per_unit_distance: float = 0.001


@dataclass(frozen=True, slots=True)
class SpawnRules:
    """Deployment layout of a force composition."""

    friendly_origin_x: float = 200.0
    enemy_origin_x: float = 1000.0
    origin_y: float = 400.0
    friendly_facing: float = 90.0
    enemy_facing: float = 270.0
    starting_morale: float = 80.0
    # category -> (x offset toward the rear, y spacing, fixed y offset)
    layout: Mapping[UnitCategory, tuple[float, float, float]] = field(
        default_factory=lambda: MappingProxyType(
            {
                UnitCategory.INFANTRY: (0.0, 100.0, 0.0),
                UnitCategory.ARMOR: (50.0, 120.0, 0.0),
                UnitCategory.ARTILLERY: (100.0, 0.0, 200.0),
                UnitCategory.RECON: (-100.0, 80.0, 0.0),
            }
        )
    )
    default_layout: tuple[float, float, float] = (150.0, 90.0, -200.0)


@dataclass(frozen=True, slots=True)
class SimulationRules:
    """Loop cadence and map dimensions."""

    ai_interval: float = 2.0
    map_width: int = 1200
    map_height: int = 800
    cell_size: int = 20
    speed_steps: tuple[int, ...] = (1, 2, 4)
    left_right_split_x: float = 600.0


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    combat: CombatRules = CombatRules()
    assessment: AssessmentRules = AssessmentRules()
    strategy: StrategyRules = StrategyRules()
    orders: OrderRules = OrderRules()
    movement: MovementRules = MovementRules()
    spawn: SpawnRules = SpawnRules()
    simulation: SimulationRules = SimulationRules()
    terrain_modifiers: Mapping[TerrainType, TerrainModifiers] = field(
        default_factory=lambda: TERRAIN_MODIFIERS
    )
    weather_effects: Mapping[Weather, WeatherEffects] = field(default_factory=lambda: WEATHER_EFFECTS)
    time_of_day_visibility: Mapping[TimeOfDay, float] = field(
        default_factory=lambda: TIME_OF_DAY_VISIBILITY
    )
    unit_templates: Mapping[UnitCategory, UnitTemplate] = field(
        default_factory=lambda: UNIT_TEMPLATES
    )


DEFAULT_RULES = RulesConfig()
