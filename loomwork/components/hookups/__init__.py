"""Hookups components."""
