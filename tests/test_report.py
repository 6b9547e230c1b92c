from __future__ import annotations

from datetime import date

import pytest

from conftest import make_txn
from folio.errors import InvariantViolation
from folio.pricing import StaticPriceLookup
from folio.report import REPORT_COLUMNS, portfolio_report, report_frame

ASOF = date(2024, 1, 1)


def _txns():
    return [
        make_txn(100, 10.0, key="A", isin="INF_A", on=date(2023, 1, 1)),
        make_txn(10, 10.0, key="B", isin="INF_B", on=date(2023, 1, 1)),
        make_txn(5, 4.0, key="C", isin="INF_C", on=date(2023, 3, 1)),
        make_txn(-5, 4.0, key="C", isin="INF_C", on=date(2023, 4, 1)),
    ]


def _prices():
    return StaticPriceLookup({"INF_A": 11.0, "INF_B": 0.0, "INF_C": 5.0})


def test_report_rows_and_totals(settings):
    rep = portfolio_report(_txns(), _prices(), asof=ASOF, settings=settings)
    rows = {r["holding_key"]: r for r in rep["rows"]}

    assert rep["asof"] == "2024-01-01"
    assert rep["holdings"] == 3
    assert set(rows) == {"A", "B"}  # C is fully redeemed at cost

    assert rows["A"]["value"] == pytest.approx(1100.0)
    assert rows["A"]["gain"] == pytest.approx(100.0)
    assert rows["A"]["xirr"] == pytest.approx(0.10, abs=1e-4)
    assert rows["A"]["xirr_error"] is None

    assert rep["total_value"] == pytest.approx(sum(r["value"] for r in rep["rows"]))
    assert rep["total_cost"] == pytest.approx(sum(r["cost_basis"] for r in rep["rows"]))
    assert rep["total_gain"] == pytest.approx(0.0)


def test_worthless_holding_records_xirr_error(settings):
    rep = portfolio_report(_txns(), _prices(), asof=ASOF, settings=settings)
    b = next(r for r in rep["rows"] if r["holding_key"] == "B")
    assert b["value"] == 0.0
    assert b["xirr"] is None
    assert b["xirr_error"] == "NoRoot"


def test_portfolio_xirr_uses_all_flows(settings):
    rep = portfolio_report(_txns(), _prices(), asof=ASOF, settings=settings)
    # Outflows 1000 + 100 + 20, inflows 20 + total value 1100: close to break-even.
    assert rep["xirr_error"] is None
    assert abs(rep["xirr"]) < 0.01


def test_include_closed(settings):
    rep = portfolio_report(_txns(), _prices(), asof=ASOF, include_closed=True, settings=settings)
    assert {r["holding_key"] for r in rep["rows"]} == {"A", "B", "C"}


def test_strict_follows_settings(settings):
    txns = [make_txn(1, 1.0, key="A", isin="INF_A"), make_txn(-2, 1.0, key="A", isin="INF_A")]
    portfolio_report(txns, StaticPriceLookup(default=1.0), asof=ASOF, settings=settings)

    strict_settings = settings.model_copy(update={"FOLIO_STRICT_OVERSELL": True})
    with pytest.raises(InvariantViolation):
        portfolio_report(txns, StaticPriceLookup(default=1.0), asof=ASOF, settings=strict_settings)


def test_report_frame(settings):
    rep = portfolio_report(_txns(), _prices(), asof=ASOF, settings=settings)
    df = report_frame(rep)
    assert list(df.columns) == REPORT_COLUMNS
    assert len(df) == 2
    assert report_frame({"rows": []}).empty
