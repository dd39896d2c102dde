"""Internal helpers: errors, logging, settings and type aliases."""
