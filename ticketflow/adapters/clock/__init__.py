"""Clock adapters - Drive countdown timers from an event loop."""

from .ticker import Ticker

__all__ = ["Ticker"]
