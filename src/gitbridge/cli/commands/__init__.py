"""Top-level gitbridge commands."""
