"""Local persistence: SQLite-backed key-value store."""
