"""Weave workflows."""
