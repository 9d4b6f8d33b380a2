"""Shared helpers for wsrepos core modules."""
