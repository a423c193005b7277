"""Content sync and view-state derivation for the learning dashboard."""
