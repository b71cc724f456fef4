"""Order-1 (per-context) extension."""
