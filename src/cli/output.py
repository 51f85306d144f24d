"""
Human-readable terminal output for quotes, option chains, trades and accounts.
"""

from __future__ import annotations

import json
import math
from typing import Any

from tda_core.contracts import Trade
from tda_core.symbols import OCC_SYMBOL_LENGTH, decode


def _fmt_price(value: Any) -> str:
    if value is None:
        return "-"
    try:
        return f"{float(value):.2f}"
    except (TypeError, ValueError):
        return str(value)


def _describe(symbol: str) -> str:
    """'ANET 2018-06-15 275.00 C' for an OCC option, the ticker otherwise."""
    if len(symbol) != OCC_SYMBOL_LENGTH or "_" in symbol:
        return symbol.strip()
    info = decode(symbol)
    exp = info.expiration
    side = "C" if info.call else "P"
    return f"{info.underlying} 20{exp[0:2]}-{exp[2:4]}-{exp[4:6]} {info.strike:.2f} {side}"


def format_quotes(quotes: dict[str, Any]) -> str:
    if not quotes:
        return "No quotes returned."
    lines = [f"{'Symbol':<32} {'Bid':>10} {'Ask':>10} {'Last':>10}"]
    for symbol, quote in quotes.items():
        quote = quote or {}
        lines.append(
            f"{_describe(symbol):<32} {_fmt_price(quote.get('bidPrice')):>10} "
            f"{_fmt_price(quote.get('askPrice')):>10} {_fmt_price(quote.get('lastPrice')):>10}"
        )
    return "\n".join(lines)


def format_option_chain(chain: dict[str, Any]) -> str:
    """One line per contract, calls then puts, using OCC symbols."""
    lines = [f"--- Option chain: {chain.get('symbol', '?')} ({chain.get('status', 'UNKNOWN')}) ---"]
    count = 0
    for map_key, label in (("callExpDateMap", "CALL"), ("putExpDateMap", "PUT")):
        for strikes in chain.get(map_key, {}).values():
            for contracts in strikes.values():
                for c in contracts:
                    count += 1
                    lines.append(
                        f"{label:<4} {c.get('symbol', '?'):<22} bid {_fmt_price(c.get('bid')):>8}  "
                        f"ask {_fmt_price(c.get('ask')):>8}  last {_fmt_price(c.get('last')):>8}"
                    )
    if count == 0:
        lines.append("No contracts returned.")
    return "\n".join(lines)


def format_trades(trades: list[Trade]) -> str:
    """Trade header line followed by one indented line per leg."""
    if not trades:
        return "No executed trades in range."
    lines: list[str] = []
    for t in trades:
        lines.append(f"Trade {t.id}  traded {t.traded or '-'}  order price {_fmt_price(t.price)}")
        for leg in t.legs:
            side = "BUY " if math.copysign(1, leg.size) > 0 else "SELL"
            lines.append(
                f"  {side} {abs(leg.size):>8g}  {_describe(leg.symbol):<32} @ {_fmt_price(leg.price)}"
            )
    return "\n".join(lines)


def trades_to_json(trades: list[Trade]) -> str:
    return json.dumps([t.to_dict() for t in trades], indent=2)


def format_accounts(accounts: list[dict[str, Any]]) -> str:
    if not accounts:
        return "No accounts."
    lines = []
    for entry in accounts:
        acct = entry.get("securitiesAccount", entry)
        lines.append(f"{acct.get('accountId', '?')}  {acct.get('type', '')}".rstrip())
    return "\n".join(lines)
