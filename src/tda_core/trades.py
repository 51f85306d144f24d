"""
Trade aggregator: broker order history -> one Trade per filled order.

Orders may be nested (childOrderStrategies for conditional/bracket orders) and
partially filled across several activities. Executions are grouped by legId into a
quantity-weighted fill price; size is signed by the leg's instruction.
"""

import logging
from typing import Any, Iterable

from tda_core.contracts import LegFill, OrderRecord, Trade, TradeLeg
from tda_core.symbols import broker_to_occ

logger = logging.getLogger("tda.trades")


def _as_record(order: OrderRecord | dict[str, Any]) -> OrderRecord:
    if isinstance(order, OrderRecord):
        return order
    return OrderRecord.from_dict(order)


def flatten_filled_orders(raw_orders: Iterable[OrderRecord | dict[str, Any]]) -> list[OrderRecord]:
    """Filled orders in encounter order: each order's filled children, then the order itself."""
    flat: list[OrderRecord] = []
    for raw in raw_orders:
        order = _as_record(raw)
        flat.extend(child for child in order.child_orders if child.is_filled)
        if order.is_filled:
            flat.append(order)
    return flat


def aggregate_executions(order: OrderRecord) -> tuple[dict[int, LegFill], str | None]:
    """Group an order's executions by legId. Returns (fills by legId, latest execution time)."""
    fills: dict[int, LegFill] = {}
    latest: str | None = None
    for execution in order.executions:
        fills.setdefault(execution.leg_id, LegFill()).add(execution.quantity, execution.price)
        if execution.time is not None and (latest is None or execution.time > latest):
            latest = execution.time
    return fills, latest


def build_trade(order: OrderRecord) -> Trade | None:
    """Project one order into a Trade, or None if it has no executions."""
    fills, latest = aggregate_executions(order)
    if not fills:
        return None

    legs: list[TradeLeg] = []
    for leg in order.legs:
        fill = fills.get(leg.leg_id, LegFill())
        multiplier = 1 if leg.is_buy else -1
        legs.append(
            TradeLeg(
                symbol=broker_to_occ(leg.symbol),
                price=fill.price_each,
                size=fill.size * multiplier,
            )
        )

    return Trade(
        id=order.order_id,
        traded=order.close_time or latest,
        price=order.price,
        legs=legs,
    )


def build_trades(raw_orders: Iterable[OrderRecord | dict[str, Any]]) -> list[Trade]:
    """
    Build trade records from raw order history.

    A ParseError from a leg symbol propagates; no partial list is returned.
    """
    trades: list[Trade] = []
    orders = flatten_filled_orders(raw_orders)
    for order in orders:
        trade = build_trade(order)
        if trade is None:
            logger.debug("Order %s has no executions; skipped", order.order_id)
            continue
        trades.append(trade)
    logger.info("Built %d trade(s) from %d filled order(s)", len(trades), len(orders))
    return trades
