"""Patching components."""
