"""
Workflows package.
"""

from .weave.weave_wf import weave_workflow

__all__ = [
    "weave_workflow",
]
