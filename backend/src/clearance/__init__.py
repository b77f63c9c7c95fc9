"""Clearance workflow: state machine operations, readiness views, blob sweep."""
