"""JSON API blueprints; every route returns the ``{"ok", "data", "error"}`` envelope."""
