"""
tda-core: option symbol codec and trade aggregation.

Pure and synchronous; no I/O. The client package fetches the JSON and calls in here.
"""

from tda_core.contracts import (
    ExecutionLeg,
    LegFill,
    OptionInfo,
    OrderLeg,
    OrderRecord,
    ParseError,
    Trade,
    TradeLeg,
)
from tda_core.marketdata import normalize_option_chain, quote_symbol_map, remap_quotes
from tda_core.symbols import broker_to_occ, decode, occ_to_broker
from tda_core.trades import build_trades

__all__ = [
    "ExecutionLeg",
    "LegFill",
    "OptionInfo",
    "OrderLeg",
    "OrderRecord",
    "ParseError",
    "Trade",
    "TradeLeg",
    "broker_to_occ",
    "build_trades",
    "decode",
    "normalize_option_chain",
    "occ_to_broker",
    "quote_symbol_map",
    "remap_quotes",
]
