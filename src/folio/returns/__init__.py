"""Money-weighted returns (XIRR) over dated, signed cash flows."""
