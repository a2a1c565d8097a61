"""Force composition and deployment of units at scenario start."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from tacsim.domain.enums import Affiliation, Echelon, UnitCategory
from tacsim.domain.models import Position, Unit, UnitID
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig

CATEGORY_CODES: dict[UnitCategory, str] = {
    UnitCategory.INFANTRY: "INF",
    UnitCategory.MECHANIZED_INFANTRY: "MECH",
    UnitCategory.ARMOR: "ARM",
    UnitCategory.ARTILLERY: "ART",
    UnitCategory.RECON: "RCN",
    UnitCategory.ENGINEER: "ENG",
    UnitCategory.AVIATION: "AVN",
    UnitCategory.LOGISTICS: "LOG",
    UnitCategory.MEDICAL: "MED",
    UnitCategory.COMMAND: "CMD",
}

# Infantry, armor, artillery and recon deploy first so unit ordering (and with
# it the combat pairing order) stays stable when other branches are added.
DEPLOYMENT_ORDER: tuple[UnitCategory, ...] = (
    UnitCategory.INFANTRY,
    UnitCategory.ARMOR,
    UnitCategory.ARTILLERY,
    UnitCategory.RECON,
    UnitCategory.MECHANIZED_INFANTRY,
    UnitCategory.ENGINEER,
    UnitCategory.AVIATION,
    UnitCategory.LOGISTICS,
    UnitCategory.MEDICAL,
    UnitCategory.COMMAND,
)


@dataclass(slots=True)
class ForceComposition:
    """Number of platoons of each category fielded by one side."""

    counts: dict[UnitCategory, int] = field(default_factory=dict)

    @classmethod
    def of(cls, **counts: int) -> ForceComposition:
        """Build a composition from keyword counts, e.g. ``of(infantry=2)``."""

        return cls({UnitCategory(name): number for name, number in counts.items()})

    def count(self, category: UnitCategory) -> int:
        return max(0, self.counts.get(category, 0))

    def total(self) -> int:
        return sum(self.count(category) for category in UnitCategory)


def create_unit(
    category: UnitCategory,
    affiliation: Affiliation,
    index: int,
    x: float,
    y: float,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> Unit:
    """Create a full-strength platoon from the category template."""

    template = rules.unit_templates[category]
    spawn = rules.spawn
    facing = spawn.friendly_facing if affiliation == Affiliation.FRIENDLY else spawn.enemy_facing
    return Unit(
        id=UnitID(f"{affiliation}-{category}-{index}"),
        designation=f"{affiliation.value[0].upper()}-{CATEGORY_CODES[category]}-{index + 1}",
        category=category,
        echelon=Echelon.PLATOON,
        affiliation=affiliation,
        count=template.count,
        max_count=template.count,
        position=Position(x=x, y=y, elevation=0.0),
        speed=template.speed,
        firepower=template.firepower,
        armor=template.armor,
        detection_range=template.detection_range,
        weapon_range=template.weapon_range,
        morale=spawn.starting_morale,
        facing=facing,
    )


def deploy_forces(
    composition: ForceComposition,
    affiliation: Affiliation,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[Unit]:
    """Place a side's units at the fixed spawn offsets.

    Friendly forces deploy on the west edge facing east and enemy forces on
    the east edge facing west; rear echelons sit behind the line.
    """

    spawn = rules.spawn
    if affiliation == Affiliation.FRIENDLY:
        origin_x, rear_sign = spawn.friendly_origin_x, -1.0
    else:
        origin_x, rear_sign = spawn.enemy_origin_x, 1.0

    units: list[Unit] = []
    for category in DEPLOYMENT_ORDER:
        rear, spacing, y_offset = spawn.layout.get(category, spawn.default_layout)
        for index in range(composition.count(category)):
            x = origin_x + rear_sign * rear
            y = spawn.origin_y + y_offset + index * spacing
            units.append(create_unit(category, affiliation, index, x, y, rules=rules))
    return units


def composition_from_mapping(counts: Mapping[str, int]) -> ForceComposition:
    """Parse a loosely typed mapping (e.g. API payload) into a composition."""

    return ForceComposition({UnitCategory(key): int(value) for key, value in counts.items()})
