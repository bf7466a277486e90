"""Schema sources."""
