"""Graph components."""
