"""
Pytest configuration and shared fixtures for folio tests.
"""
import json
import sys
from datetime import date
from pathlib import Path

import pytest


def pytest_configure():
    """
    Ensure `src/` is on sys.path for the src-layout package import (`folio`).
    This keeps tests runnable without requiring an editable install.
    """
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if src.exists():
        sys.path.insert(0, str(src))


# =============================================================================
# Test Data Helpers
# =============================================================================

def make_txn(
    units: float,
    price: float,
    *,
    key: str = "Alpha Bluechip-111",
    isin: str = "INF000A01AB1",
    on: date = date(2023, 1, 1),
    amount: float | None = None,
):
    """
    Build a Transaction; amount defaults to -(units * price).

    Usage:
        t = make_txn(10, 5.0, key="Fund-1", on=date(2023, 6, 1))
    """
    from folio.positions.models import Transaction

    return Transaction(
        date=on,
        instrument_id=isin,
        holding_key=key,
        signed_units=float(units),
        unit_price=float(price),
        signed_amount=-(units * price) if amount is None else float(amount),
    )


def make_record(**overrides) -> dict:
    """A raw export record in the DTtransaction shape."""
    rec = {
        "trxnDate": "2023-01-01",
        "scheme": "ABC01",
        "schemeName": "Alpha Bluechip Fund",
        "purchasePrice": "10.00",
        "trxnUnits": "100.000",
        "trxnAmount": "1,000.00",
        "folio": "111",
        "broker": "DIRECT",
        "isin": "INF000A01AB1",
    }
    rec.update(overrides)
    return rec


@pytest.fixture
def settings():
    from folio.config import Settings

    return Settings(
        FOLIO_DEFAULT_NAV=100.0,
        FOLIO_XIRR_LOWER=-0.9999999,
        FOLIO_XIRR_UPPER=1.0,
        FOLIO_XIRR_MAXITER=100,
        FOLIO_STRICT_OVERSELL=False,
    )


@pytest.fixture
def export_file(tmp_path: Path) -> Path:
    """One holding: 100 units bought at 10.00 on 2023-01-01."""
    path = tmp_path / "transaction_data.json"
    path.write_text(json.dumps({"DTtransaction": [make_record()]}))
    return path
