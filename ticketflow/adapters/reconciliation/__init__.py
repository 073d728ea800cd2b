"""Reconciliation adapters - Where failed soft writes are reported."""

from .console import ConsoleReconciliationSink

__all__ = ["ConsoleReconciliationSink"]
