from __future__ import annotations

import math
from typing import Iterable

from folio.errors import DataFormatError
from folio.positions.models import Holding, HoldingValuation
from folio.pricing import PriceLookup


def value_holding(holding: Holding, price: float) -> HoldingValuation:
    """Mark one holding at `price`: value = units x price, gain = value - cost basis."""
    price = float(price)
    if not math.isfinite(price) or price < 0:
        raise DataFormatError(f"{holding.instrument_id}: price must be a finite number >= 0, got {price!r}")
    value = holding.units_held * price
    return HoldingValuation(
        holding=holding,
        price=price,
        current_value=value,
        unrealized_gain=value - holding.cost_basis,
    )


def value_holdings(holdings: Iterable[Holding], prices: PriceLookup) -> list[HoldingValuation]:
    # Each holding is priced by its own instrument id.
    return [value_holding(h, prices(h.instrument_id)) for h in holdings]
