"""Domain layer of the tactical command simulator.

Everything here runs in-memory and synchronously.  It exposes:

* Dataclasses and enumerations describing the battlefield (see :mod:`models`).
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions: combat resolution, situational assessment, strategy
  selection and order generation.
* The :class:`~tacsim.domain.simulation.Simulation` orchestrator, the only
  component that mutates world state.
"""

from . import (
    ai,
    assessment,
    combat,
    enums,
    forces,
    missions,
    models,
    order_generation,
    orders,
    rules_config,
    simulation,
    strategy,
    terrain,
)

__all__ = [
    "ai",
    "assessment",
    "combat",
    "enums",
    "forces",
    "missions",
    "models",
    "order_generation",
    "orders",
    "rules_config",
    "simulation",
    "strategy",
    "terrain",
]
