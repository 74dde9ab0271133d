"""
WeaverService - load an architecture description and weave it.

An architecture description is a Python module (dotted name or file path)
exposing:

- RINGS: mapping of export name -> root Ring
- CAPABILITIES: iterable of Capability (or a CapabilityRegistry)
- MATRIX: GeneratorMatrix (optional, empty when absent)
- TIEUPS: iterable of TieUp (optional)
- TEMPLATES: mapping of template id -> template source (optional)
"""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Any

from loomwork.components.emission.template_renderer_comp import TemplateRenderer
from loomwork.components.graph.generator_matrix_comp import GeneratorMatrix
from loomwork.components.graph.plan_builder_comp import TieUp, build_plan
from loomwork.helpers.dto.capability_dto import Capability
from loomwork.helpers.dto.plan_dto import WeavingPlan
from loomwork.helpers.dto.ring_dto import Ring
from loomwork.helpers.dto.weave_dto import WeaveConfig, WeaveResult
from loomwork.helpers.exceptions import ArchitectureLoadError
from loomwork.services.config_svc import ConfigService
from loomwork.workflows.weave.weave_wf import weave_workflow

logger = logging.getLogger(__name__)


@dataclass
class Architecture:
    """A loaded architecture description."""

    source: str
    rings: Mapping[str, Ring]
    capabilities: list[Capability]
    matrix: GeneratorMatrix
    tieups: list[TieUp] = field(default_factory=list)
    templates: dict[str, str] = field(default_factory=dict)


def _import_module(target: str) -> ModuleType:
    path = Path(target)
    if path.suffix == ".py" or path.exists():
        if not path.is_file():
            raise ArchitectureLoadError(f"Architecture file not found: {target}")
        module_name = f"loomwork_architecture_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ArchitectureLoadError(f"Cannot load architecture file: {target}")
        module = importlib.util.module_from_spec(spec)
        # Make the file's siblings importable, like running it as a script would.
        parent = str(path.resolve().parent)
        if parent not in sys.path:
            sys.path.insert(0, parent)
        spec.loader.exec_module(module)
        return module
    return importlib.import_module(target)


def load_architecture(target: str) -> Architecture:
    """
    Import an architecture description.

    Args:
        target: Dotted module name or path to a .py file

    Raises:
        ArchitectureLoadError: import failed or required attributes are missing
    """
    try:
        module = _import_module(target)
    except ArchitectureLoadError:
        raise
    except Exception as e:
        raise ArchitectureLoadError(f"Failed to import architecture '{target}': {type(e).__name__}: {e}") from e

    rings = getattr(module, "RINGS", None)
    if not isinstance(rings, Mapping) or not rings:
        raise ArchitectureLoadError(f"Architecture '{target}' must define a non-empty RINGS mapping")
    for export_name, ring in rings.items():
        if not isinstance(ring, Ring):
            raise ArchitectureLoadError(f"RINGS['{export_name}'] is {type(ring).__name__}, expected Ring")

    capabilities: Any = getattr(module, "CAPABILITIES", None)
    if capabilities is None:
        raise ArchitectureLoadError(f"Architecture '{target}' must define CAPABILITIES")
    capability_list = list(capabilities)
    for capability in capability_list:
        if not isinstance(capability, Capability):
            raise ArchitectureLoadError(f"CAPABILITIES holds {type(capability).__name__}, expected Capability")

    matrix = getattr(module, "MATRIX", None) or GeneratorMatrix()
    if not isinstance(matrix, GeneratorMatrix):
        raise ArchitectureLoadError(f"MATRIX is {type(matrix).__name__}, expected GeneratorMatrix")

    tieups = list(getattr(module, "TIEUPS", None) or ())
    templates = dict(getattr(module, "TEMPLATES", None) or {})
    logger.info(
        f"[weaver] Loaded {target}: {len(rings)} export(s), {len(capability_list)} capabilities, "
        f"{len(matrix)} generator(s), {len(tieups)} tie-up(s)"
    )
    return Architecture(
        source=target,
        rings=rings,
        capabilities=capability_list,
        matrix=matrix,
        tieups=tieups,
        templates=templates,
    )


class WeaverService:
    """
    Service running weaves with configuration from ConfigService.

    Every call to weave() gets its own block registry and renderer; nothing
    is shared between runs.
    """

    def __init__(self, config_service: ConfigService | None = None) -> None:
        self.config_service = config_service or ConfigService()

    def build_config(self, **overrides: Any) -> WeaveConfig:
        return self.config_service.build_weave_config(**overrides)

    def plan(self, architecture: Architecture, verbose: bool = False) -> WeavingPlan:
        """Build the plan without executing any task."""
        return build_plan(
            architecture.rings,
            architecture.capabilities,
            architecture.matrix,
            tieups=architecture.tieups,
            verbose=verbose,
        )

    def weave(self, architecture: Architecture, config: WeaveConfig | None = None, **overrides: Any) -> WeaveResult:
        """
        Weave an architecture.

        Args:
            architecture: Loaded architecture description
            config: Explicit run config; built from ConfigService when omitted
            **overrides: WeaveConfig fields overriding configured values

        Returns:
            WeaveResult of the run
        """
        config = config or self.build_config(**overrides)
        renderer = TemplateRenderer(template_dirs=config.template_dirs, templates=architecture.templates)
        logger.info(f"[weaver] Weaving {architecture.source} into {config.workspace_root}")
        return weave_workflow(
            architecture.rings,
            architecture.capabilities,
            architecture.matrix,
            config,
            tieups=architecture.tieups,
            renderer=renderer,
        )
