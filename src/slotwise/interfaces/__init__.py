"""Outbound ports used by the service layer.

Adapters in `slotwise.adapters` implement these contracts; handlers only
depend on the abstractions defined here.
"""
