from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import date

import pytest

from conftest import make_txn
from folio.errors import DataFormatError, InvariantViolation
from folio.positions.aggregate import aggregate


def test_acquisitions_only_sum_units_and_cost():
    txns = [make_txn(10, 5.0), make_txn(2.5, 8.0), make_txn(0.125, 16.0)]
    h = aggregate(txns)["Alpha Bluechip-111"]
    assert h.units_held == pytest.approx(12.625)
    assert h.cost_basis == pytest.approx(10 * 5.0 + 2.5 * 8.0 + 0.125 * 16.0)
    assert h.transactions == 3


def test_disposing_all_units_leaves_zero():
    h = aggregate([make_txn(10, 5.0), make_txn(-10, 5.0)])["Alpha Bluechip-111"]
    assert h.units_held == 0
    assert h.cost_basis == pytest.approx(0.0)
    assert h.is_closed


def test_disposal_removes_cost_at_its_own_price():
    # Average cost would leave 25.0; the sale price is removed instead.
    h = aggregate([make_txn(10, 5.0), make_txn(-5, 8.0)])["Alpha Bluechip-111"]
    assert h.units_held == pytest.approx(5.0)
    assert h.cost_basis == pytest.approx(10.0)


def test_disposal_above_cost_can_drive_basis_negative():
    h = aggregate([make_txn(10, 5.0), make_txn(-10, 6.0)])["Alpha Bluechip-111"]
    assert h.units_held == 0
    assert h.cost_basis == pytest.approx(-10.0)


def test_oversell_is_ignored():
    h = aggregate([make_txn(10, 5.0), make_txn(-11, 6.0)])["Alpha Bluechip-111"]
    assert h.units_held == pytest.approx(10.0)
    assert h.cost_basis == pytest.approx(50.0)
    assert h.transactions == 2


def test_oversell_on_fresh_holding_creates_empty_holding():
    h = aggregate([make_txn(-3, 6.0)])["Alpha Bluechip-111"]
    assert h.units_held == 0
    assert h.cost_basis == 0


def test_strict_mode_raises_on_oversell():
    with pytest.raises(InvariantViolation):
        aggregate([make_txn(10, 5.0), make_txn(-11, 6.0)], strict=True)


def test_zero_units_is_noop():
    h = aggregate([make_txn(10, 5.0), make_txn(0, 99.0, amount=0.0)])["Alpha Bluechip-111"]
    assert h.units_held == pytest.approx(10.0)
    assert h.cost_basis == pytest.approx(50.0)


def test_interleaved_holdings_do_not_mix():
    a = [make_txn(10, 5.0, key="A"), make_txn(-4, 6.0, key="A"), make_txn(1, 7.0, key="A")]
    b = [make_txn(3, 2.0, key="B", isin="INF000B"), make_txn(-5, 2.0, key="B", isin="INF000B")]
    mixed = [a[0], b[0], a[1], b[1], a[2]]

    together = aggregate(mixed)
    assert together["A"] == aggregate(a)["A"]
    assert together["B"] == aggregate(b)["B"]
    assert together["B"].instrument_id == "INF000B"


def test_order_is_respected():
    # Selling before buying is an oversell, so the sale is skipped.
    buy = make_txn(10, 5.0, on=date(2023, 2, 1))
    sell = make_txn(-5, 5.0, on=date(2023, 1, 1))
    assert aggregate([sell, buy])["Alpha Bluechip-111"].units_held == pytest.approx(10.0)
    assert aggregate([buy, sell])["Alpha Bluechip-111"].units_held == pytest.approx(5.0)


def test_result_is_read_only():
    holdings = aggregate([make_txn(10, 5.0)])
    with pytest.raises(TypeError):
        holdings["other"] = holdings["Alpha Bluechip-111"]  # type: ignore[index]
    with pytest.raises(FrozenInstanceError):
        holdings["Alpha Bluechip-111"].units_held = 0  # type: ignore[misc]


def test_empty_input_gives_empty_mapping():
    assert len(aggregate([])) == 0


def test_negative_unit_price_rejected():
    with pytest.raises(DataFormatError):
        make_txn(10, -1.0)
