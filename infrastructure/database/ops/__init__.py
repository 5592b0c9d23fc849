"""Low-level SQL operation mixins combined by ``SQLiteDatabaseHandler``."""
