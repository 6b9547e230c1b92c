"""Position tracking.

Folds an ordered transaction log into per-holding unit counts and cost bases,
and values the resulting holdings against current prices.
"""
