"""Analytics over recorded time."""
