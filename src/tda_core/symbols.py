"""
Option symbol codec: OCC 21-character symbols <-> broker compact symbols.

OCC:    "ANET  180615C00275250"  (underlying[6] YYMMDD C|P dollars[5] cents[3])
Broker: "ANET_061518C275.25"     (underlying _ MMDDYY C|P dollars [.cents])

Equity tickers pass through both directions unchanged.
"""

import math
import re

from tda_core.contracts import OptionInfo, ParseError

OCC_SYMBOL_LENGTH = 21

_EQUITY_RE = re.compile(r"[A-Za-z0-9]+", re.ASCII)
_OPTION_RE = re.compile(r"([A-Za-z0-9]+)_(\d{2})(\d{2})(\d{2})([CP])(\d+)(\.(\d+))?", re.ASCII)
_STRIKE_RE = re.compile(r"(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


def _parse_strike(raw: str) -> float:
    text = raw.strip()
    if not text:
        return 0.0
    # plain decimal only; float() alone also takes "1_000", "inf" and non-ASCII digits
    if not _STRIKE_RE.fullmatch(text):
        return math.nan
    return float(text)


def decode(symbol: str) -> OptionInfo:
    """Decode an OCC symbol. Never raises; a non-numeric strike comes back as NaN."""
    underlying = symbol[:6].strip()
    if len(symbol) <= 6:
        return OptionInfo(underlying=underlying)

    return OptionInfo(
        underlying=underlying,
        expiration=symbol[6:12],
        call=symbol[12:13] == "C",
        strike=_parse_strike(symbol[13:]) / 1000,
    )


def occ_to_broker(occ: str) -> str:
    """Convert an OCC option symbol to broker form; anything else is returned unchanged."""
    if len(occ) != OCC_SYMBOL_LENGTH or "_" in occ:
        return occ

    info = decode(occ)
    side = "C" if info.call else "P"
    yymmdd = info.expiration
    expiration = f"{yymmdd[2:4]}{yymmdd[4:6]}{yymmdd[0:2]}"
    dollars = occ[13:18].lstrip(" 0")
    # trailing zeros only: "250" -> "25", "025" -> "025"
    cents_raw = occ[18:21].rstrip(" 0")
    cents = f".{cents_raw}" if cents_raw else ""
    return f"{info.underlying}_{expiration}{side}{dollars}{cents}"


def broker_to_occ(broker: str) -> str:
    """
    Convert a broker symbol to OCC form. Equity tickers are returned unchanged.

    Raises ParseError if the input is neither an equity ticker nor a broker option symbol.
    """
    if _EQUITY_RE.fullmatch(broker):
        return broker

    m = _OPTION_RE.fullmatch(broker)
    if m is None:
        raise ParseError(broker)

    ticker, mm, dd, yy, side, dollars, _, cents = m.groups()
    return (
        ticker.ljust(6)
        + f"{yy}{mm}{dd}"
        + side
        + dollars.zfill(5)
        + (cents or "000").ljust(3, "0")
    )
