"""SLOTWISE

Booking allocation and payment-settlement engine for salon and service
stores. It reserves time slots without double-booking, tracks partial and
full payments through a ledger, and pays store owners once a day.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
