"""Treadles components."""
