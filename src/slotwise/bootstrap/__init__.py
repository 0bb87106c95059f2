"""Bootstrap (composition root) for SLOTWISE.

Assembles the application at runtime: wires concrete adapters to
service-layer handlers, composes shared services (message bus, unit of work,
clock, id generator, payout provider), and reads configuration.

Import rules:
- Entry points import *this* package (not adapters/service_layer/interfaces/domain).
- This package may import: `slotwise.adapters`, `slotwise.service_layer`,
  `slotwise.interfaces`, `slotwise.domain`, and `slotwise.config`.
- Inner layers must not import `slotwise.bootstrap`.

No business rules live here; this is assembly and lifecycle only.
"""

from .bootstrap import (
    AppContainer,
    bootstrap,
    bootstrap_queries,
    build_message_bus,
    build_write_uow,
)

__all__ = [
    "AppContainer",
    "bootstrap",
    "bootstrap_queries",
    "build_message_bus",
    "build_write_uow",
]
