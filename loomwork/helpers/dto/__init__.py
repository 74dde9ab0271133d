"""
Data transfer objects shared across layers.

DTO rules:
- Plain data containers (dataclasses or pydantic models), no I/O.
- Small derived properties are fine; domain logic lives in components.
"""
