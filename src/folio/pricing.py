"""
Current price ("NAV") lookup.

The valuation step only needs a callable ``instrument_id -> price``. Two
implementations live here: an in-memory mapping with an optional fallback
price, and a loader that builds one from a JSON or CSV price file.
"""
from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Mapping, Protocol

from folio.errors import DataFormatError, PriceNotFound
from folio.utils.numbers import parse_number

logger = logging.getLogger(__name__)


class PriceLookup(Protocol):
    def __call__(self, instrument_id: str) -> float: ...


class StaticPriceLookup:
    def __init__(self, prices: Mapping[str, float] | None = None, default: float | None = None):
        self._prices = {str(k).strip().upper(): float(v) for k, v in (prices or {}).items()}
        self.default = default

    def __call__(self, instrument_id: str) -> float:
        key = str(instrument_id).strip().upper()
        if key in self._prices:
            return self._prices[key]
        if self.default is not None:
            logger.debug("No price for %s; using default %s", instrument_id, self.default)
            return float(self.default)
        raise PriceNotFound(instrument_id)

    def __len__(self) -> int:
        return len(self._prices)


def load_price_file(path: str, *, default: float | None = None) -> StaticPriceLookup:
    """
    Read a price file into a StaticPriceLookup.

    Accepted formats:
    - .json: an object mapping instrument id -> price
    - .csv: header row with an id column (isin/instrument_id/symbol) and a price column (nav/price)
    """
    p = Path(path)
    if not p.exists():
        raise DataFormatError(f"price file not found: {p}")

    prices: dict[str, float] = {}
    if p.suffix.lower() == ".json":
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except UnicodeDecodeError as e:
            raise DataFormatError(f"{p}: not valid UTF-8 ({e})") from e
        except json.JSONDecodeError as e:
            raise DataFormatError(f"{p}: invalid JSON ({e})") from e
        if not isinstance(raw, dict):
            raise DataFormatError(f"{p}: expected an object of instrument id -> price")
        for k, v in raw.items():
            prices[str(k)] = _price(v, where=f"{p}:{k}")
    else:
        try:
            with open(p, newline="", encoding="utf-8") as f:
                r = csv.DictReader(f)
                field_map = {str(k).strip().lower(): str(k) for k in (r.fieldnames or []) if k}
                k_id = field_map.get("isin") or field_map.get("instrument_id") or field_map.get("symbol")
                k_px = field_map.get("nav") or field_map.get("price")
                if not k_id or not k_px:
                    raise DataFormatError(f"{p}: price CSV must include headers isin/instrument_id and nav/price")
                for i, row in enumerate(r):
                    key = str(row.get(k_id) or "").strip()
                    if not key:
                        logger.debug("Skipping %s row %d: empty instrument id", p, i + 1)
                        continue
                    prices[key] = _price(row.get(k_px), where=f"{p} row {i + 1}")
        except UnicodeDecodeError as e:
            raise DataFormatError(f"{p}: not valid UTF-8 ({e})") from e

    logger.info("Loaded %d prices from %s", len(prices), p)
    return StaticPriceLookup(prices, default=default)


def _price(x: object, *, where: str) -> float:
    try:
        v = parse_number(x)
    except ValueError as e:
        raise DataFormatError(f"{where}: {e}") from e
    if v < 0:
        raise DataFormatError(f"{where}: price must be >= 0, got {v}")
    return v
