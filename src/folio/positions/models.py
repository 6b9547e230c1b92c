from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date

from folio.errors import DataFormatError


@dataclass(frozen=True)
class Transaction:
    date: date
    instrument_id: str
    holding_key: str
    signed_units: float  # >0 acquisition, <0 disposal
    unit_price: float
    signed_amount: float  # <0 cash paid out, >0 cash received
    scheme: str = ""
    scheme_name: str = ""
    folio: str = ""
    broker: str = ""

    def __post_init__(self) -> None:
        for name in ("signed_units", "unit_price", "signed_amount"):
            v = getattr(self, name)
            if not isinstance(v, (int, float)) or not math.isfinite(v):
                raise DataFormatError(f"{name} must be a finite number, got {v!r}")
        if self.unit_price < 0:
            raise DataFormatError(f"unit_price must be >= 0, got {self.unit_price!r}")
        if not self.holding_key:
            raise DataFormatError("holding_key must not be empty")


@dataclass(frozen=True)
class Holding:
    holding_key: str
    instrument_id: str
    units_held: float = 0.0
    cost_basis: float = 0.0
    transactions: int = 0

    @property
    def is_closed(self) -> bool:
        return self.units_held == 0 and self.cost_basis == 0


@dataclass(frozen=True)
class HoldingValuation:
    holding: Holding
    price: float
    current_value: float
    unrealized_gain: float
