"""Entry points for SLOTWISE.

Entry points only talk to `slotwise.bootstrap`, `slotwise.config` and the
read-side `slotwise.service_layer.queries`; wiring lives in bootstrap.
"""
