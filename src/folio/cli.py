"""
folio CLI

Commands:
- folio holdings FILE           Units and cost basis per holding
- folio xirr FILE --value V     Portfolio XIRR for a given current value
- folio report FILE             Valuation, gain and XIRR per holding
"""
from __future__ import annotations

import json
from datetime import date

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from folio.config import load_settings
from folio.errors import FolioError
from folio.utils.dates import parse_trade_date
from folio.utils.formatting import color_for_pnl, format_currency, format_pct, format_units
from folio.utils.logging import log_event, setup_logging

app = typer.Typer(
    add_completion=False,
    help="""folio — holdings valuation and XIRR from a transaction export

\b
  folio holdings data/transaction_data.json
  folio xirr data/transaction_data.json --value 10000
  folio report data/transaction_data.json --prices navs.csv

\b
Run 'folio <command> --help' for details.
""",
)

console = Console()


def _fail(e: Exception) -> None:
    console.print(f"[red]{type(e).__name__}:[/red] {e}")
    raise typer.Exit(1)


def _asof(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return parse_trade_date(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _path(path: str | None) -> str:
    return path or load_settings().transactions_path


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    settings = load_settings()
    setup_logging("DEBUG" if verbose else settings.log_level)


@app.command("holdings")
def holdings_cmd(
    path: str = typer.Argument(None, help="Transaction file (.json or .csv)"),
    strict: bool = typer.Option(False, "--strict", help="Fail on disposals larger than units held"),
):
    """Units held and cost basis per holding."""
    from folio.loaders import load_transactions
    from folio.positions.aggregate import aggregate

    settings = load_settings()
    try:
        txns = load_transactions(_path(path))
        holdings = aggregate(txns, strict=strict or settings.strict_oversell)
    except FolioError as e:
        _fail(e)

    table = Table(show_header=True, expand=False)
    table.add_column("Holding", style="cyan")
    table.add_column("ISIN")
    table.add_column("Units", justify="right")
    table.add_column("Cost basis", justify="right")
    table.add_column("Txns", justify="right")
    for h in holdings.values():
        table.add_row(
            h.holding_key,
            h.instrument_id,
            format_units(h.units_held),
            format_currency(h.cost_basis),
            str(h.transactions),
        )
    console.print(table)


@app.command("xirr")
def xirr_cmd(
    path: str = typer.Argument(None, help="Transaction file (.json or .csv)"),
    value: float = typer.Option(..., "--value", help="Current portfolio value (terminal inflow)"),
    asof: str = typer.Option(None, "--asof", help="Valuation date YYYY-MM-DD (default: today)"),
):
    """Portfolio XIRR from historical amounts plus the current value."""
    from folio.loaders import load_transactions
    from folio.returns.cashflows import xirr_for_transactions

    settings = load_settings()
    lower, upper = settings.xirr_bounds
    try:
        txns = load_transactions(_path(path))
        rate = xirr_for_transactions(
            txns, value, asof=_asof(asof), lower=lower, upper=upper, maxiter=settings.xirr_maxiter
        )
    except FolioError as e:
        _fail(e)

    console.print(f"Portfolio XIRR: [bold]{format_pct(rate)}[/bold]")


@app.command("report")
def report_cmd(
    path: str = typer.Argument(None, help="Transaction file (.json or .csv)"),
    prices: str = typer.Option(None, "--prices", "-p", help="Price file: JSON {isin: nav} or CSV isin,nav"),
    default_nav: float = typer.Option(None, "--default-nav", help="Price for instruments missing from the price file"),
    asof: str = typer.Option(None, "--asof", help="Valuation date YYYY-MM-DD (default: today)"),
    strict: bool = typer.Option(False, "--strict", help="Fail on disposals larger than units held"),
    include_closed: bool = typer.Option(False, "--all", help="Include fully redeemed holdings"),
    as_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    csv_out: str = typer.Option(None, "--csv", help="Also write holding rows to this CSV file"),
):
    """Valuation, unrealized gain and XIRR per holding and for the portfolio."""
    from folio.loaders import load_transactions
    from folio.pricing import StaticPriceLookup, load_price_file
    from folio.report import portfolio_report, report_frame

    settings = load_settings()
    nav = default_nav if default_nav is not None else settings.default_nav
    try:
        lookup = load_price_file(prices, default=nav) if prices else StaticPriceLookup(default=nav)
        txns = load_transactions(_path(path))
        rep = portfolio_report(
            txns,
            lookup,
            asof=_asof(asof),
            strict=strict or settings.strict_oversell,
            include_closed=include_closed,
            settings=settings,
        )
    except FolioError as e:
        _fail(e)

    if csv_out:
        report_frame(rep).to_csv(csv_out, index=False)
        log_event("report_csv_written", {"path": csv_out, "rows": len(rep["rows"])})

    if as_json:
        typer.echo(json.dumps(rep, indent=2, default=str))
        return

    table = Table(show_header=True, expand=False)
    table.add_column("Holding", style="cyan")
    table.add_column("Units", justify="right")
    table.add_column("Cost", justify="right")
    table.add_column("NAV", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Gain", justify="right")
    table.add_column("XIRR", justify="right")
    for r in rep["rows"]:
        gain = float(r["gain"])
        style = color_for_pnl(gain)
        table.add_row(
            r["holding_key"],
            format_units(r["units"]),
            format_currency(r["cost_basis"]),
            format_currency(r["price"], decimals=4),
            format_currency(r["value"]),
            f"[{style}]{gain:+,.2f}[/{style}]",
            format_pct(r["xirr"]) if r["xirr"] is not None else f"[dim]{r['xirr_error']}[/dim]",
        )
    console.print(table)

    total_gain = float(rep["total_gain"])
    style = color_for_pnl(total_gain)
    xirr_txt = format_pct(rep["xirr"]) if rep["xirr"] is not None else f"n/a ({rep['xirr_error']})"
    console.print(
        Panel(
            f"Value: {format_currency(rep['total_value'])}  |  Cost: {format_currency(rep['total_cost'])}  |  "
            f"Gain: [{style}]{total_gain:+,.2f}[/{style}]  |  XIRR: {xirr_txt}\n"
            f"As of {rep['asof']}  |  {rep['holdings']} holdings",
            title="Portfolio",
            expand=False,
        )
    )


if __name__ == "__main__":
    app()
