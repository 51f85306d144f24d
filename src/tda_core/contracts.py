"""
Data contracts for tda-core: OptionInfo, raw order records, Trade output.

tda-core consumes the broker's order JSON and produces Trade records.
No I/O; these are plain dataclasses.
"""

from dataclasses import dataclass, field
from typing import Any


class ParseError(ValueError):
    """Raised when a broker symbol matches neither the equity nor the option pattern."""

    kind = "malformed-symbol"

    def __init__(self, symbol: str) -> None:
        super().__init__(f"Malformed broker symbol: {symbol!r}")
        self.symbol = symbol


# ---------------------------------------------------------------------------
# Symbols
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OptionInfo:
    """Decoded OCC symbol. expiration/call/strike are None for equities."""

    underlying: str
    expiration: str | None = None  # YYMMDD
    call: bool | None = None
    strike: float | None = None

    @property
    def is_option(self) -> bool:
        return self.expiration is not None


# ---------------------------------------------------------------------------
# Raw order history (broker JSON -> typed records)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExecutionLeg:
    """One fill against a leg: quantity at price, at time."""

    leg_id: int
    quantity: float
    price: float
    time: str | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "ExecutionLeg":
        return cls(
            leg_id=raw["legId"],
            quantity=float(raw["quantity"]),
            price=float(raw["price"]),
            time=raw.get("time"),
        )


@dataclass(frozen=True)
class OrderLeg:
    leg_id: int
    symbol: str  # broker form
    instruction: str  # "BUY" | "SELL" | "BUY_TO_OPEN" | "SELL_TO_CLOSE" | ...
    quantity: float = 0.0

    @property
    def is_buy(self) -> bool:
        return self.instruction.startswith("BUY")

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "OrderLeg":
        return cls(
            leg_id=raw["legId"],
            symbol=raw["instrument"]["symbol"],
            instruction=raw["instruction"],
            quantity=float(raw.get("quantity", 0)),
        )


@dataclass(frozen=True)
class OrderRecord:
    """
    A brokerage order as returned by the order-history endpoint.

    child_orders holds conditional/bracket orders (childOrderStrategies),
    parsed recursively into the same shape.
    """

    order_id: Any
    status: str
    legs: tuple[OrderLeg, ...] = ()
    executions: tuple[ExecutionLeg, ...] = ()
    close_time: str | None = None
    price: float | None = None
    filled_quantity: float = 0.0
    child_orders: tuple["OrderRecord", ...] = ()

    @property
    def is_filled(self) -> bool:
        """True if the order filled completely or at least partially."""
        return self.status == "FILLED" or self.filled_quantity > 0

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "OrderRecord":
        executions = tuple(
            ExecutionLeg.from_dict(leg)
            for activity in raw.get("orderActivityCollection") or []
            for leg in activity.get("executionLegs") or []
        )
        return cls(
            order_id=raw.get("orderId"),
            status=raw.get("status", ""),
            legs=tuple(OrderLeg.from_dict(leg) for leg in raw.get("orderLegCollection") or []),
            executions=executions,
            close_time=raw.get("closeTime"),
            price=raw.get("price"),
            filled_quantity=float(raw.get("filledQuantity") or 0),
            child_orders=tuple(cls.from_dict(child) for child in raw.get("childOrderStrategies") or []),
        )


# ---------------------------------------------------------------------------
# Aggregation and output
# ---------------------------------------------------------------------------


@dataclass
class LegFill:
    """Running fill totals for one legId: total = sum(qty * price), size = sum(qty)."""

    total: float = 0.0
    size: float = 0.0

    def add(self, quantity: float, price: float) -> None:
        self.total += quantity * price
        self.size += quantity

    @property
    def price_each(self) -> float | None:
        if self.size == 0:
            return None
        return self.total / self.size


@dataclass(frozen=True)
class TradeLeg:
    symbol: str  # OCC form
    price: float | None
    size: float  # signed: + buy, - sell

    def to_dict(self) -> dict[str, Any]:
        return {"symbol": self.symbol, "price": self.price, "size": self.size}


@dataclass(frozen=True)
class Trade:
    """One executed (possibly multi-leg) order with a weighted fill per leg."""

    id: Any
    traded: str | None
    price: float | None
    legs: list[TradeLeg] = field(default_factory=list)
    commissions: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "traded": self.traded,
            "price": self.price,
            "commissions": self.commissions,
            "legs": [leg.to_dict() for leg in self.legs],
        }
