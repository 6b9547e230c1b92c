from __future__ import annotations

from datetime import date
from typing import Iterable

from folio.positions.models import Transaction
from folio.returns.xirr import DEFAULT_LOWER, DEFAULT_MAXITER, DEFAULT_UPPER, CashFlow, solve
from folio.utils.dates import today


def build_cash_flows(
    transactions: Iterable[Transaction],
    current_value: float,
    *,
    asof: date | None = None,
) -> list[CashFlow]:
    """
    Historical signed amounts in date order, then a terminal inflow of `current_value` at `asof` (default today).
    """
    flows = [CashFlow(date=t.date, amount=float(t.signed_amount)) for t in transactions]
    flows.sort(key=lambda cf: cf.date)
    flows.append(CashFlow(date=asof or today(), amount=float(current_value)))
    return flows


def xirr_for_transactions(
    transactions: Iterable[Transaction],
    current_value: float,
    *,
    asof: date | None = None,
    lower: float = DEFAULT_LOWER,
    upper: float = DEFAULT_UPPER,
    maxiter: int = DEFAULT_MAXITER,
) -> float:
    return solve(
        build_cash_flows(transactions, current_value, asof=asof),
        lower=lower,
        upper=upper,
        maxiter=maxiter,
    )
