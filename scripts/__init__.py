"""Operational scripts for fedipost."""
