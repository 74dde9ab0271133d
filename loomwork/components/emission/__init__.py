"""Emission components."""
