"""Holdings valuation and money-weighted return (XIRR) from a transaction log."""

__version__ = "0.1.0"
