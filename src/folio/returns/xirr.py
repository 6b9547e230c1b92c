"""
XIRR: the annualized rate that zeroes the net present value of dated cash flows.

NPV is discounted from the first cash flow's date using actual days / 365.25:

    npv(r) = sum_i amount_i / (1 + r) ** ((date_i - date_0).days / 365.25)

The root is searched with Brent's method on a bounded interval. By default
the interval is (-0.9999999, 1.0]: the rate cannot reach -100%, and +100% a
year is the practical cap. Every failure is raised, never returned as a
sentinel value.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Sequence

import numpy as np
from scipy.optimize import brentq

from folio.errors import CashFlowOrderError, InsufficientData, InvalidSearchInterval, NoConvergence, NoRoot
from folio.utils.dates import days_between

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.25
DEFAULT_LOWER = -0.9999999
DEFAULT_UPPER = 1.0
DEFAULT_MAXITER = 100


@dataclass(frozen=True)
class CashFlow:
    date: date
    amount: float  # <0 paid out, >0 received


def years_between(a: date, b: date) -> float:
    return days_between(a, b) / DAYS_PER_YEAR


def _arrays(cash_flows: Sequence[CashFlow]) -> tuple[np.ndarray, np.ndarray]:
    d0 = cash_flows[0].date
    years = np.array([years_between(d0, cf.date) for cf in cash_flows], dtype=float)
    amounts = np.array([cf.amount for cf in cash_flows], dtype=float)
    return years, amounts


def _npv(rate: float, years: np.ndarray, amounts: np.ndarray) -> float:
    with np.errstate(over="ignore", divide="ignore"):
        return float(np.sum(amounts / np.power(1.0 + rate, years)))


def npv(rate: float, cash_flows: Sequence[CashFlow]) -> float:
    """Net present value of `cash_flows` at `rate`, discounted to the first entry's date."""
    if not cash_flows:
        raise InsufficientData("npv needs at least one cash flow")
    years, amounts = _arrays(cash_flows)
    return _npv(rate, years, amounts)


def _check_series(cash_flows: Sequence[CashFlow]) -> None:
    if not cash_flows:
        raise InsufficientData("xirr needs at least one cash flow")
    for prev, cur in zip(cash_flows, cash_flows[1:]):
        if cur.date < prev.date:
            raise CashFlowOrderError(
                f"cash flows must be in date order: {cur.date.isoformat()} follows {prev.date.isoformat()}"
            )
    if not any(cf.amount < 0 for cf in cash_flows) or not any(cf.amount > 0 for cf in cash_flows):
        raise NoRoot("xirr needs at least one negative and one positive cash flow")


def _finite_lower(f, lower: float, upper: float, *, steps: int = 60) -> tuple[float, float]:
    """
    Raise `lower` until npv is finite there.

    Near -100% the discount factor of a long series underflows and npv becomes
    inf or nan. The gap to -1 is widened geometrically (1 + r -> sqrt(1 + r)).
    """
    f_lo = f(lower)
    for _ in range(steps):
        if np.isfinite(f_lo):
            break
        candidate = -1.0 + np.sqrt(1.0 + lower)
        if candidate >= upper:
            break
        lower = float(candidate)
        f_lo = f(lower)
    if np.isfinite(f_lo):
        logger.debug("xirr search starts at %.8g (npv=%.6g)", lower, f_lo)
    return lower, f_lo


def solve(
    cash_flows: Sequence[CashFlow],
    *,
    lower: float = DEFAULT_LOWER,
    upper: float = DEFAULT_UPPER,
    maxiter: int = DEFAULT_MAXITER,
    xtol: float = 2e-12,
) -> float:
    """
    Return the annualized rate at which the NPV of `cash_flows` is zero.

    Raises:
        InsufficientData: empty series.
        NoRoot: every amount has the same sign (or is zero).
        CashFlowOrderError: dates go backwards.
        NoConvergence: NPV does not change sign between `lower` and `upper`,
            or Brent's method needs more than `maxiter` iterations.
    """
    cash_flows = list(cash_flows)
    _check_series(cash_flows)
    if not lower < upper or lower <= -1.0:
        raise InvalidSearchInterval(f"invalid search interval [{lower}, {upper}]")

    years, amounts = _arrays(cash_flows)

    def f(r: float) -> float:
        return _npv(r, years, amounts)

    f_hi = f(upper)
    lower, f_lo = _finite_lower(f, lower, upper)
    if f_lo == 0.0:
        return float(lower)
    if f_hi == 0.0:
        return float(upper)
    if np.isnan(f_lo) or np.isnan(f_hi) or np.sign(f_lo) == np.sign(f_hi):
        raise NoConvergence(
            f"npv does not change sign on [{lower}, {upper}] (npv={f_lo:.6g} .. {f_hi:.6g})"
        )

    rate, result = brentq(f, lower, upper, xtol=xtol, maxiter=maxiter, full_output=True, disp=False)
    if not result.converged:
        raise NoConvergence(f"brentq did not converge in {maxiter} iterations ({result.flag})")
    logger.debug("xirr=%.8f after %d iterations over %d cash flows", rate, result.iterations, len(cash_flows))
    return float(rate)
