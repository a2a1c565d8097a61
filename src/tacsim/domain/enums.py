"""Enumerations used across the tactical simulation domain."""

from __future__ import annotations

from enum import StrEnum


class UnitCategory(StrEnum):
    """Branch of a deployable force element."""

    INFANTRY = "infantry"
    MECHANIZED_INFANTRY = "mechanized_infantry"
    ARMOR = "armor"
    ARTILLERY = "artillery"
    RECON = "recon"
    ENGINEER = "engineer"
    AVIATION = "aviation"
    LOGISTICS = "logistics"
    MEDICAL = "medical"
    COMMAND = "command"


class Echelon(StrEnum):
    """Organisational size tier."""

    TEAM = "team"
    SQUAD = "squad"
    PLATOON = "platoon"
    COMPANY = "company"
    BATTALION = "battalion"
    BRIGADE = "brigade"
    DIVISION = "division"
    CORPS = "corps"


class Affiliation(StrEnum):
    """Side a unit or objective belongs to."""

    FRIENDLY = "friendly"
    ENEMY = "enemy"
    NEUTRAL = "neutral"
    UNKNOWN = "unknown"


class UnitStatus(StrEnum):
    """Per-unit state machine values."""

    IDLE = "idle"
    MOVING = "moving"
    ENGAGING = "engaging"
    RETREATING = "retreating"
    DESTROYED = "destroyed"
    PINNED = "pinned"
    SUPPRESSED = "suppressed"


class CommandType(StrEnum):
    """Command an order may carry."""

    MOVE = "move"
    ATTACK = "attack"
    DEFEND = "defend"
    FLANK = "flank"
    RETREAT = "retreat"
    SUPPRESS = "suppress"
    RECON = "recon"
    ARTILLERY_STRIKE = "artillery_strike"
    HOLD = "hold"
    RESUPPLY = "resupply"


class OrderStatus(StrEnum):
    """Order lifecycle states."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TerrainType(StrEnum):
    """Terrain classes of a grid cell."""

    OPEN = "open"
    FOREST = "forest"
    URBAN = "urban"
    HILL = "hill"
    WATER = "water"
    ROAD = "road"
    MOUNTAIN = "mountain"
    SWAMP = "swamp"


class Weather(StrEnum):
    """Weather conditions affecting combat."""

    CLEAR = "clear"
    RAIN = "rain"
    FOG = "fog"
    SNOW = "snow"
    STORM = "storm"


class TimeOfDay(StrEnum):
    """Light conditions of the battlefield."""

    DAY = "day"
    DAWN = "dawn"
    DUSK = "dusk"
    NIGHT = "night"


class Difficulty(StrEnum):
    """Difficulty tag gating AI behaviour."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXTREME = "extreme"


class StrategyType(StrEnum):
    """Discrete AI behaviour modes."""

    AGGRESSIVE_ASSAULT = "aggressive_assault"
    FLANKING_MANEUVER = "flanking_maneuver"
    METHODICAL_ATTACK = "methodical_attack"
    DEFENSIVE_POSTURE = "defensive_posture"
    FOCUS_FIRE = "focus_fire"
    TACTICAL_RETREAT = "tactical_retreat"
    HOLD_GROUND = "hold_ground"


class CombatWinner(StrEnum):
    """Outcome designation of one engagement."""

    ATTACKER = "attacker"
    DEFENDER = "defender"
    DRAW = "draw"


class LogEventType(StrEnum):
    """Kinds of entries appended to the combat log."""

    ENGAGEMENT = "engagement"
    OBJECTIVE_CAPTURED = "objective_captured"
    MISSION_COMPLETE = "mission_complete"


class ObjectiveType(StrEnum):
    """What a mission expects of an objective."""

    CAPTURE = "capture"
    DEFEND = "defend"
    DESTROY = "destroy"


class ObjectiveStatus(StrEnum):
    """Objective progress as seen by the player."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class MissionType(StrEnum):
    """Mission categories in the catalogue."""

    OFFENSIVE = "offensive"
    DEFENSIVE = "defensive"
    NIGHT_OPERATION = "night_operation"


class MissionOutcome(StrEnum):
    """Narrative result of a mission."""

    IN_PROGRESS = "in_progress"
    VICTORY = "victory"
    DEFEAT = "defeat"
