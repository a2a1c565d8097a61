"""Rule-based tactical AI: assess, select a strategy, generate orders."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tacsim.domain.assessment import assess
from tacsim.domain.combat import opposing_affiliation
from tacsim.domain.enums import Affiliation, Difficulty, UnitStatus
from tacsim.domain.models import Order, TacticalAssessment, WorldState
from tacsim.domain.order_generation import OrderIdSource, generate_orders
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig
from tacsim.domain.strategy import Strategy, select_strategy
from tacsim.utils.geometry import centroid

logger = logging.getLogger(__name__)

LEARNING_DIFFICULTIES = frozenset({Difficulty.HARD, Difficulty.EXTREME})


@dataclass(slots=True)
class PlayerBehaviorMemory:
    """Observed tendencies of the opposing side.

    ``left_bias``/``right_bias`` count the observations in which the opposing
    force's centre lay on each half of the map; ``aggression_score`` is the
    share of its units engaging at the last observation.  Recorded for
    inspection only.
    """

    left_bias: int = 0
    right_bias: int = 0
    aggression_score: float = 0.0
    observations: int = 0


class TacticalAI:
    """Decision pipeline for one side of the battle."""

    def __init__(
        self,
        difficulty: Difficulty = Difficulty.MEDIUM,
        side: Affiliation = Affiliation.ENEMY,
        *,
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self.difficulty = difficulty
        self.side = side
        self.rules = rules
        self.last_strategy: Strategy | None = None
        self.last_assessment: TacticalAssessment | None = None
        self.memory: PlayerBehaviorMemory | None = (
            PlayerBehaviorMemory() if difficulty in LEARNING_DIFFICULTIES else None
        )

    def make_decision(self, world: WorldState, next_order_id: OrderIdSource) -> list[Order]:
        """Run one planning cycle and return the orders to apply."""

        assessment = assess(world, self.side, rules=self.rules)
        strategy = select_strategy(assessment, rules=self.rules)
        orders = generate_orders(
            strategy,
            world,
            assessment,
            self.side,
            next_order_id=next_order_id,
            rules=self.rules,
        )

        if self.last_strategy is None or self.last_strategy.type != strategy.type:
            logger.info(
                "%s AI switches to %s (force ratio %.2f)",
                self.side,
                strategy.type,
                assessment.force_ratio,
            )
        self.last_strategy = strategy
        self.last_assessment = assessment

        if self.memory is not None:
            self.observe(world)
        return orders

    def observe(self, world: WorldState) -> None:
        """Update the behaviour memory from the opposing side's positions."""

        if self.memory is None:
            return
        opponent = opposing_affiliation(self.side)
        if opponent is None:
            return
        units = world.units_of(opponent, active_only=True)
        if not units:
            return

        center = centroid(unit.position for unit in units)
        if center.x < self.rules.simulation.left_right_split_x:
            self.memory.left_bias += 1
        else:
            self.memory.right_bias += 1
        engaging = sum(1 for unit in units if unit.status == UnitStatus.ENGAGING)
        self.memory.aggression_score = engaging / len(units)
        self.memory.observations += 1
