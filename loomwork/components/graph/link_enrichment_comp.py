"""
Link enrichment: derive per-method data from a capability's link metadata.

The link says which field of the owning core structure implements the
capability and how that field is wrapped. Templates need to know whether a
call produces a result and how to reach the service through its wrappers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from loomwork.helpers.dto.capability_dto import Capability, CapabilityLink, MethodEnrichment

logger = logging.getLogger(__name__)


def service_access_expr(link: CapabilityLink) -> str:
    """
    Build the expression that reaches the linked service from ``self``.

    Wrappers are applied outermost first:
    option -> ``.as_ref().ok_or("<field> not initialized")?``,
    mutex -> ``.lock().map_err(|e| e.to_string())?``, arc -> no-op.
    """
    expr = f"self.{link.field_name}"
    for wrapper in link.wrappers:
        if wrapper == "option":
            expr += f'.as_ref().ok_or("{link.field_name} not initialized")?'
        elif wrapper == "mutex":
            expr += ".lock().map_err(|e| e.to_string())?"
        elif wrapper == "arc":
            continue
        else:
            raise ValueError(f"Unknown wrapper '{wrapper}' on {link.struct_name}.{link.field_name}")
    return f"let service = {expr};"


def enrich_capabilities(capabilities: Iterable[Capability]) -> dict[tuple[str, str], MethodEnrichment]:
    """
    Compute enrichment for every method of every capability.

    Returns:
        (capability name, method name) -> MethodEnrichment
    """
    enrichment: dict[tuple[str, str], MethodEnrichment] = {}
    for capability in capabilities:
        link = capability.link
        access = service_access_expr(link) if link else None
        for m in capability.methods:
            enrichment[(capability.name, m.name)] = MethodEnrichment(
                use_result=m.return_type.lower() != "void",
                wrappers=link.wrappers if link else (),
                field_name=link.field_name if link else None,
                service_access=access,
            )
    logger.debug(f"[enrichment] Enriched {len(enrichment)} methods")
    return enrichment
