"""
CLI entry point: tda quotes | chain | trades | accounts.

Every command loads config from --config (default config.yaml), refreshes an
access token, and prints human-readable output. OAuth secrets come from the
environment (or a .env file).
"""

import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator

import click
from dotenv import load_dotenv

from cli.output import (
    format_accounts,
    format_option_chain,
    format_quotes,
    format_trades,
    trades_to_json,
)
from cli.structured_log import StructuredEventLogger
from client import (
    AuthData,
    OptionChainRequest,
    TdaApiError,
    TdaAuthError,
    TdaClient,
    TokenRefresher,
)
from config import ConfigError, load_config
from tda_core.contracts import ParseError

load_dotenv()

logger = logging.getLogger("tda")


def _setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"Expected an ISO date (e.g. 2024-01-31), got {value!r}") from exc


@contextmanager
def _session(ctx: click.Context) -> Iterator[tuple[TdaClient, StructuredEventLogger]]:
    """Config -> token refresher -> client. Errors become ClickExceptions."""
    try:
        cfg = load_config(ctx.obj["config_path"])
    except (FileNotFoundError, ConfigError) as exc:
        raise click.ClickException(str(exc)) from exc

    _setup_logging(cfg.logging.level)
    events = StructuredEventLogger(enabled=cfg.logging.structured_logs)
    ctx.obj["config"] = cfg

    if not cfg.auth.client_id or not cfg.auth.refresh_token:
        raise click.ClickException(
            "TDA_CLIENT_ID and TDA_REFRESH_TOKEN must be set (environment or .env)."
        )

    refresher = TokenRefresher(
        AuthData(client_id=cfg.auth.client_id, refresh_token=cfg.auth.refresh_token),
        host=cfg.host,
        timeout=cfg.timeout,
        refresh_interval=cfg.auth.refresh_interval_s,
        on_refresh=lambda token: events.token_refreshed(token.expires_in),
    )
    try:
        with refresher, TdaClient(
            refresher, host=cfg.host, timeout=cfg.timeout, on_request=events.request_complete
        ) as client:
            yield client, events
    except (ParseError, TdaApiError, TdaAuthError) as exc:
        events.error(type(exc).__name__, detail=str(exc))
        logger.error("%s", exc)
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """tda-client: market data, option chains and executed trades."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------- tda quotes ----------


@cli.command()
@click.argument("symbols", nargs=-1, required=True)
@click.pass_context
def quotes(ctx: click.Context, symbols: tuple[str, ...]) -> None:
    """Quote equities and options. Options may be given in OCC or broker form."""
    with _session(ctx) as (client, _events):
        result = client.get_quotes(list(symbols))
    click.echo(format_quotes(result))


# ---------- tda chain ----------


@cli.command()
@click.argument("symbol")
@click.option("--from", "from_str", default=None, help="First expiration date (ISO).")
@click.option("--to", "to_str", default=None, help="Last expiration date (ISO).")
@click.option("--contract-type", type=click.Choice(["CALL", "PUT"], case_sensitive=False), default=None)
@click.option("--ntm", is_flag=True, default=False, help="Near-the-money strikes only.")
@click.option("--nonstandard", is_flag=True, default=False, help="Include non-standard contracts.")
@click.pass_context
def chain(
    ctx: click.Context,
    symbol: str,
    from_str: str | None,
    to_str: str | None,
    contract_type: str | None,
    ntm: bool,
    nonstandard: bool,
) -> None:
    """Print the option chain for SYMBOL with OCC contract symbols."""
    request = OptionChainRequest(
        symbol=symbol.upper(),
        from_date=_parse_date(from_str),
        to_date=_parse_date(to_str),
        include_nonstandard=nonstandard,
        contract_type=contract_type.upper() if contract_type else None,
        near_the_money=ntm,
    )
    with _session(ctx) as (client, _events):
        result = client.get_option_chain(request)
    click.echo(format_option_chain(result))


# ---------- tda trades ----------


@cli.command()
@click.option("--account", "account_id", default=None, help="Account id (defaults to config account_id).")
@click.option("--from", "from_str", default=None, help="Earliest entered date (ISO).")
@click.option("--to", "to_str", default=None, help="Latest entered date (ISO).")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print trades as JSON.")
@click.pass_context
def trades(
    ctx: click.Context,
    account_id: str | None,
    from_str: str | None,
    to_str: str | None,
    as_json: bool,
) -> None:
    """Show executed orders as trades with size-weighted fill prices per leg."""
    from_date = _parse_date(from_str)
    to_date = _parse_date(to_str)
    with _session(ctx) as (client, events):
        account = account_id or ctx.obj["config"].account_id
        if not account:
            raise click.ClickException("No account id: pass --account or set account_id in config.")
        result = client.get_trades(account, from_date=from_date, to_date=to_date)
        events.trades_built(account, len(result))
    click.echo(trades_to_json(result) if as_json else format_trades(result))


# ---------- tda accounts ----------


@cli.command()
@click.pass_context
def accounts(ctx: click.Context) -> None:
    """List the accounts the refresh token can access."""
    with _session(ctx) as (client, _events):
        result = client.get_accounts()
    click.echo(format_accounts(result))


if __name__ == "__main__":
    cli()
