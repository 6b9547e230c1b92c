"""
CLI formatting utilities - centralized color/number display helpers.
"""
from __future__ import annotations


def color_for_pnl(value: float) -> str:
    """Get color for P&L."""
    if value > 0:
        return "green"
    elif value < 0:
        return "red"
    return "white"


def format_currency(value: float, decimals: int = 2) -> str:
    """Format a currency value."""
    return f"{value:,.{decimals}f}"


def format_units(value: float, decimals: int = 3) -> str:
    return f"{value:,.{decimals}f}"


def format_pct(value: float | None, decimals: int = 2, show_sign: bool = True) -> str:
    """Format a fractional rate (0.1 -> 10.00%). None renders as an em-dash placeholder."""
    if value is None:
        return "—"
    if show_sign:
        return f"{value * 100:+.{decimals}f}%"
    return f"{value * 100:.{decimals}f}%"
