"""Application-level helpers (transactions, post-commit side effects)."""
