"""
Position aggregation: turn an ordered transaction log into holdings.

Two quirks are kept on purpose because existing ledgers depend on them:

- A disposal larger than the units currently held is skipped (the holding is
  left untouched). Pass ``strict=True`` to raise ``InvariantViolation`` instead.
- A disposal removes cost at the disposal's own unit price, not at the
  average cost of the units held. Selling above the average purchase price
  therefore pushes ``cost_basis`` below the cost of the remaining units, and
  can drive it negative.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from folio.errors import InvariantViolation
from folio.positions.models import Holding, Transaction

logger = logging.getLogger(__name__)


@dataclass
class _Position:
    instrument_id: str
    units: float = 0.0
    cost: float = 0.0
    count: int = 0


def _apply(pos: _Position, t: Transaction, *, strict: bool) -> None:
    pos.count += 1
    if t.signed_units > 0:
        pos.units += t.signed_units
        pos.cost += t.signed_units * t.unit_price
    elif t.signed_units < 0:
        sold = -t.signed_units
        if sold <= pos.units:
            pos.units -= sold
            pos.cost -= sold * t.unit_price
        elif strict:
            raise InvariantViolation(
                f"{t.holding_key}: disposal of {sold} units on {t.date.isoformat()} exceeds {pos.units} held"
            )
        else:
            logger.debug(
                "Ignoring oversell for %s on %s: %s units requested, %s held",
                t.holding_key,
                t.date.isoformat(),
                sold,
                pos.units,
            )


def aggregate(transactions: Iterable[Transaction], *, strict: bool = False) -> Mapping[str, Holding]:
    """
    Fold transactions, in the order given, into a read-only mapping of holding key -> Holding.

    The input is not sorted here; callers supply chronological order.
    """
    positions: dict[str, _Position] = {}
    for t in transactions:
        pos = positions.get(t.holding_key)
        if pos is None:
            pos = positions[t.holding_key] = _Position(instrument_id=t.instrument_id)
        _apply(pos, t, strict=strict)

    return MappingProxyType(
        {
            key: Holding(
                holding_key=key,
                instrument_id=p.instrument_id,
                units_held=p.units,
                cost_basis=p.cost,
                transactions=p.count,
            )
            for key, p in positions.items()
        }
    )
