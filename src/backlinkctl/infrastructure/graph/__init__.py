"""Per-query link graph."""
