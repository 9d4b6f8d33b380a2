"""Top-level wsrepos commands."""
