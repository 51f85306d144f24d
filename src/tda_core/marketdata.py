"""Symbol normalization for quote and option-chain payloads."""

from typing import Any, Iterable

from tda_core.symbols import broker_to_occ, occ_to_broker

CHAIN_MAP_KEYS = ("callExpDateMap", "putExpDateMap")


def quote_symbol_map(symbols: str | Iterable[str]) -> dict[str, str]:
    """Map broker symbol -> the caller's original (OCC or equity) symbol."""
    if isinstance(symbols, str):
        symbols = [symbols]
    return {occ_to_broker(s): s for s in symbols}


def remap_quotes(results: dict[str, Any], symbol_map: dict[str, str]) -> dict[str, Any]:
    """Re-key a broker quote response by the caller's original symbols."""
    return {symbol_map.get(broker, broker): quote for broker, quote in results.items()}


def normalize_option_chain(chain: dict[str, Any]) -> dict[str, Any]:
    """Rewrite every contract symbol in the chain from broker to OCC form, in place."""
    for map_key in CHAIN_MAP_KEYS:
        for strikes in chain.get(map_key, {}).values():
            for contracts in strikes.values():
                for contract in contracts:
                    if "symbol" in contract:
                        contract["symbol"] = broker_to_occ(contract["symbol"])
    return chain
