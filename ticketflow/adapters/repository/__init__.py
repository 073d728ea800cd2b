"""Repository adapters - Storage for live flows."""

from .memory import InMemoryFlowRepository

__all__ = ["InMemoryFlowRepository"]
