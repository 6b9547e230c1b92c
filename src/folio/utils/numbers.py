from __future__ import annotations

import math


def parse_number(x: object) -> float:
    """
    Parse a numeric field that may arrive as a string ("1,234.50", "$12").

    Raises ValueError on empty or non-numeric input; nothing is coerced to zero.
    """
    if isinstance(x, bool):
        raise ValueError(f"not a number: {x!r}")
    if isinstance(x, (int, float)):
        v = float(x)
    else:
        s = str(x if x is not None else "").strip()
        if not s:
            raise ValueError("empty value")
        s = s.replace("$", "").replace(",", "").strip()
        v = float(s)
    if not math.isfinite(v):
        raise ValueError(f"not a finite number: {x!r}")
    return v
