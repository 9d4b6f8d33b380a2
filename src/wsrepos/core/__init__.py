"""Core (non-CLI) building blocks for wsrepos."""
