"""Payout provider adapters."""

from .memory import InMemoryPayoutProvider, PayoutCall

__all__ = ["InMemoryPayoutProvider", "PayoutCall"]
