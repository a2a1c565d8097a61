"""Order interpretation for player and AI orders alike."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from tacsim.domain.combat import calculate_suppression, can_engage
from tacsim.domain.enums import CommandType, OrderStatus, UnitStatus
from tacsim.domain.models import Order, Position, Unit, UnitRef, WorldState
from tacsim.domain.rules_config import DEFAULT_RULES, RulesConfig


@dataclass(slots=True)
class OrderContext:
    """Shared context passed to every order handler."""

    world: WorldState
    rules: RulesConfig = DEFAULT_RULES


@dataclass(slots=True)
class OrderExecutionResult:
    """Outcome of interpreting an order."""

    status: OrderStatus
    detail: str | None = None


OrderHandler = Callable[[OrderContext, Order, Unit], OrderExecutionResult]


class OrderExecutionError(RuntimeError):
    """Raised when an order cannot be interpreted."""


def execute_order(
    world: WorldState,
    unit: Unit,
    order: Order,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> OrderExecutionResult:
    """Translate an order into a destination/status change on ``unit``.

    Rejected orders are cancelled and leave the unit untouched.
    """

    if unit.is_destroyed:
        return _cancel(order, f"unit {unit.id} is destroyed")
    if order.unit_id != unit.id:
        return _cancel(order, f"order addressed to {order.unit_id}, not {unit.id}")

    handler = _ORDER_HANDLERS.get(order.command)
    if handler is None:
        return _cancel(order, f"unsupported command: {order.command}")

    context = OrderContext(world=world, rules=rules)
    try:
        result = handler(context, order, unit)
    except OrderExecutionError as exc:
        return _cancel(order, str(exc))

    previous = unit.current_order
    if previous is not None and previous is not order and previous.status in (
        OrderStatus.PENDING,
        OrderStatus.IN_PROGRESS,
    ):
        previous.status = OrderStatus.CANCELLED
    unit.current_order = order
    order.status = result.status
    if result.status == OrderStatus.COMPLETED:
        order.completed_at = world.elapsed_time
    return result


def _cancel(order: Order, detail: str) -> OrderExecutionResult:
    order.status = OrderStatus.CANCELLED
    return OrderExecutionResult(OrderStatus.CANCELLED, detail)


def _require_position(order: Order) -> Position:
    if not isinstance(order.target, Position):
        raise OrderExecutionError(f"{order.command} order requires a position target")
    return Position(x=order.target.x, y=order.target.y)


def _require_unit(context: OrderContext, order: Order) -> Unit:
    if not isinstance(order.target, UnitRef):
        raise OrderExecutionError(f"{order.command} order requires a unit target")
    target = context.world.units.get(order.target.unit_id)
    if target is None or target.is_destroyed:
        raise OrderExecutionError(f"target unit {order.target.unit_id} is not active")
    return target


def _resolve_target_position(context: OrderContext, order: Order) -> Position:
    if isinstance(order.target, UnitRef):
        target = _require_unit(context, order)
        return Position(x=target.position.x, y=target.position.y)
    return _require_position(order)


# ---------------------------------------------------------------------------
# Registered order handlers


def _handle_advance(context: OrderContext, order: Order, unit: Unit) -> OrderExecutionResult:
    unit.destination = _require_position(order)
    unit.status = UnitStatus.MOVING
    return OrderExecutionResult(OrderStatus.IN_PROGRESS, f"{order.command} to destination")


def _handle_attack(context: OrderContext, order: Order, unit: Unit) -> OrderExecutionResult:
    unit.destination = _resolve_target_position(context, order)
    unit.status = UnitStatus.MOVING
    return OrderExecutionResult(OrderStatus.IN_PROGRESS, "advancing to contact")


def _handle_retreat(context: OrderContext, order: Order, unit: Unit) -> OrderExecutionResult:
    unit.destination = _require_position(order)
    unit.status = UnitStatus.RETREATING
    return OrderExecutionResult(OrderStatus.IN_PROGRESS, "withdrawing to rally point")


def _handle_hold(context: OrderContext, order: Order, unit: Unit) -> OrderExecutionResult:
    unit.destination = None
    unit.status = UnitStatus.IDLE
    return OrderExecutionResult(OrderStatus.COMPLETED, "holding position")


def _handle_suppress(context: OrderContext, order: Order, unit: Unit) -> OrderExecutionResult:
    target = _require_unit(context, order)
    if not can_engage(unit, target):
        raise OrderExecutionError(f"cannot bring fire on {target.id}")

    unit.destination = None
    unit.status = UnitStatus.ENGAGING
    suppression = calculate_suppression(unit, target, rules=context.rules)
    if suppression >= context.rules.combat.suppressed_threshold:
        target.status = UnitStatus.SUPPRESSED
        return OrderExecutionResult(
            OrderStatus.COMPLETED, f"{target.id} suppressed ({suppression:.0f}%)"
        )
    return OrderExecutionResult(OrderStatus.COMPLETED, f"suppression ineffective ({suppression:.0f}%)")


_ORDER_HANDLERS: dict[CommandType, OrderHandler] = {
    CommandType.MOVE: _handle_advance,
    CommandType.DEFEND: _handle_advance,
    CommandType.FLANK: _handle_advance,
    CommandType.RECON: _handle_advance,
    CommandType.RESUPPLY: _handle_advance,
    CommandType.ATTACK: _handle_attack,
    CommandType.ARTILLERY_STRIKE: _handle_attack,
    CommandType.RETREAT: _handle_retreat,
    CommandType.HOLD: _handle_hold,
    CommandType.SUPPRESS: _handle_suppress,
}
