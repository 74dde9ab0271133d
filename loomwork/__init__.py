"""
loomwork - weaving engine for multi-target glue code generation.
"""

from loomwork.__version__ import __version__
from loomwork.workflows.weave.weave_wf import weave_workflow as weave

__all__ = ["__version__", "weave"]
