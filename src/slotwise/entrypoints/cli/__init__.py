"""Click command-line interface for SLOTWISE."""
