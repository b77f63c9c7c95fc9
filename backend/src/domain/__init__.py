"""Clearance domain: document kinds, state machine, validation, ports."""
