"""Components layer - domain logic building blocks of the weaving engine.

Components are leaf modules that:
- Do NOT import services, workflows, or interfaces
- ARE imported and used BY workflows and services
- May import from: helpers, other components

Areas:
- graph/     = capability declaration, ring traversal, matrix, plan building
- pipeline/  = pure method list transforms and filters
- emission/  = type tables, target transforms, template rendering
- patching/  = marker blocks, patch engine, run-scoped block registry
- hookups/   = structured merges into manifests and build files
- treadles/  = declarative generator compiler
"""
