"""
Transaction source: read registrar transaction exports into Transaction records.

Supported inputs:
- .json: {"DTtransaction": [ {...}, ... ]} (a bare list of records is also accepted)
- .csv: header row with the same field names

Record fields (case-sensitive, as exported):
- trxnDate: settlement date (YYYY-MM-DD; DD-MM-YYYY also accepted)
- scheme / schemeName: scheme code and display name
- purchasePrice: price per unit
- trxnUnits: units, negative for redemptions
- trxnAmount: gross amount, negative for redemptions
- folio, broker, isin

Numbers may be quoted strings with thousands separators. A record that cannot
be parsed raises DataFormatError; nothing is silently coerced to zero.
"""
from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from folio.errors import DataFormatError
from folio.positions.models import Transaction
from folio.utils.dates import parse_trade_date
from folio.utils.numbers import parse_number

logger = logging.getLogger(__name__)

TRANSACTIONS_KEY = "DTtransaction"


class RawTransaction(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    trxn_date: date = Field(alias="trxnDate")
    scheme: str = ""
    scheme_name: str = Field(alias="schemeName")
    purchase_price: float = Field(alias="purchasePrice")
    trxn_units: float = Field(alias="trxnUnits")
    trxn_amount: float = Field(alias="trxnAmount")
    folio: str
    broker: str = ""
    isin: str

    @field_validator("trxn_date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> date:
        return parse_trade_date(v)

    @field_validator("purchase_price", "trxn_units", "trxn_amount", mode="before")
    @classmethod
    def parse_numeric(cls, v: Any) -> float:
        return parse_number(v)

    @field_validator("scheme", "scheme_name", "folio", "broker", "isin", mode="before")
    @classmethod
    def clean_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("scheme_name", "folio", "isin")
    @classmethod
    def require_text(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @property
    def holding_key(self) -> str:
        return f"{self.scheme_name}-{self.folio}"

    def to_transaction(self) -> Transaction:
        return Transaction(
            date=self.trxn_date,
            instrument_id=self.isin,
            holding_key=self.holding_key,
            signed_units=self.trxn_units,
            unit_price=self.purchase_price,
            # Exported amounts are positive for purchases; purchases are cash out.
            signed_amount=-self.trxn_amount,
            scheme=self.scheme,
            scheme_name=self.scheme_name,
            folio=self.folio,
            broker=self.broker,
        )


def parse_records(records: Iterable[dict[str, Any]], *, source: str = "<records>") -> list[Transaction]:
    out: list[Transaction] = []
    for i, rec in enumerate(records):
        if not isinstance(rec, dict):
            raise DataFormatError(f"{source} record {i}: expected an object, got {type(rec).__name__}")
        try:
            out.append(RawTransaction.model_validate(rec).to_transaction())
        except ValidationError as e:
            errs = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise DataFormatError(f"{source} record {i}: {errs}") from e
        except DataFormatError as e:
            raise DataFormatError(f"{source} record {i}: {e}") from e
    return out


def _read_json(path: Path) -> list[dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise DataFormatError(f"{path}: not valid UTF-8 ({e})") from e
    except json.JSONDecodeError as e:
        raise DataFormatError(f"{path}: invalid JSON ({e})") from e
    if isinstance(data, dict):
        if TRANSACTIONS_KEY not in data:
            raise DataFormatError(f"{path}: missing '{TRANSACTIONS_KEY}' array")
        data = data[TRANSACTIONS_KEY]
    if not isinstance(data, list):
        raise DataFormatError(f"{path}: expected a list of transaction records")
    return data


def _read_csv(path: Path) -> list[dict[str, Any]]:
    try:
        with open(path, newline="", encoding="utf-8") as f:
            r = csv.DictReader(f)
            if not r.fieldnames:
                raise DataFormatError(f"{path}: CSV has no header row")
            rows = list(r)
    except UnicodeDecodeError as e:
        raise DataFormatError(f"{path}: not valid UTF-8 ({e})") from e

    for i, row in enumerate(rows):
        # DictReader fills short rows with None and collects extra cells under the None key.
        if None in row:
            raise DataFormatError(f"{path} record {i}: more cells than header columns")
        missing = [k for k, v in row.items() if v is None]
        if missing:
            raise DataFormatError(f"{path} record {i}: missing columns {', '.join(missing)}")
    return rows


def load_transactions(path: str) -> list[Transaction]:
    """Load transactions in file order. Callers supply chronologically ordered files."""
    p = Path(path)
    if not p.exists():
        raise DataFormatError(f"transaction file not found: {p}")
    if p.suffix.lower() == ".csv":
        records = _read_csv(p)
    else:
        records = _read_json(p)
    txns = parse_records(records, source=str(p))
    logger.info("Loaded %d transactions from %s", len(txns), p)
    return txns
