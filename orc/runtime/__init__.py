"""Runtime policy helpers (not user-configurable)."""
