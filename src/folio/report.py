"""
Portfolio report: holdings, valuation and XIRR in one pass.

Per-holding XIRR uses that holding's own transactions plus its current value
as the terminal inflow. Portfolio XIRR uses every transaction plus the total
current value. An XIRR failure is recorded on the row (`xirr_error`) and does
not abort the report.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Sequence

import pandas as pd

from folio.config import Settings, load_settings
from folio.errors import XirrError
from folio.positions.aggregate import aggregate
from folio.positions.models import Transaction
from folio.positions.valuation import value_holdings
from folio.pricing import PriceLookup
from folio.returns.cashflows import xirr_for_transactions
from folio.utils.dates import today

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    "holding_key",
    "instrument_id",
    "units",
    "cost_basis",
    "price",
    "value",
    "gain",
    "xirr",
    "xirr_error",
]


def _xirr(label: str, txns: Sequence[Transaction], value: float, *, asof: date, settings: Settings) -> tuple[float | None, str | None]:
    lower, upper = settings.xirr_bounds
    try:
        return (
            xirr_for_transactions(txns, value, asof=asof, lower=lower, upper=upper, maxiter=settings.xirr_maxiter),
            None,
        )
    except XirrError as e:
        logger.warning("XIRR unavailable for %s: %s", label, e)
        return None, type(e).__name__


def portfolio_report(
    transactions: Sequence[Transaction],
    prices: PriceLookup,
    *,
    asof: date | None = None,
    strict: bool | None = None,
    include_closed: bool = False,
    settings: Settings | None = None,
) -> dict[str, Any]:
    settings = settings or load_settings()
    asof = asof or today()
    strict = settings.strict_oversell if strict is None else strict

    holdings = aggregate(transactions, strict=strict)
    by_key: dict[str, list[Transaction]] = defaultdict(list)
    for t in transactions:
        by_key[t.holding_key].append(t)

    rows: list[dict[str, Any]] = []
    total_value = 0.0
    total_cost = 0.0
    for v in value_holdings(holdings.values(), prices):
        h = v.holding
        total_value += v.current_value
        total_cost += h.cost_basis
        if h.is_closed and not include_closed:
            continue
        rate, err = _xirr(h.holding_key, by_key[h.holding_key], v.current_value, asof=asof, settings=settings)
        rows.append(
            {
                "holding_key": h.holding_key,
                "instrument_id": h.instrument_id,
                "units": h.units_held,
                "cost_basis": h.cost_basis,
                "price": v.price,
                "value": v.current_value,
                "gain": v.unrealized_gain,
                "xirr": rate,
                "xirr_error": err,
            }
        )

    rate, err = _xirr("portfolio", transactions, total_value, asof=asof, settings=settings)
    return {
        "asof": asof.isoformat(),
        "holdings": len(holdings),
        "total_value": total_value,
        "total_cost": total_cost,
        "total_gain": total_value - total_cost,
        "xirr": rate,
        "xirr_error": err,
        "rows": rows,
    }


def report_frame(report: dict[str, Any]) -> pd.DataFrame:
    return pd.DataFrame(report.get("rows") or [], columns=REPORT_COLUMNS)
