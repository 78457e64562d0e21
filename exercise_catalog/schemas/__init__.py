"""Bundled JSON schemas for exercise records."""
