"""Version information for loomwork."""

# Semantic versioning: MAJOR.MINOR.PATCH
# MAJOR: Breaking changes to the architecture description API or marker format
# MINOR: New targets, hookups or pipeline stages, backward compatible
# PATCH: Bug fixes, backward compatible

__version__ = "0.3.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.3.0 - Structured hookups and run-scoped block registry
#         - Cargo, rust module, typescript index, android manifest and gradle hookups
#         - Block registry is created per weave run and persisted as a manifest
#         - Package filter scopes orphan sweep to active treadles
# 0.2.0 - Declarative treadles
#         - define_treadle / compile_treadle with generation, patch and hookup phases
#         - Jinja2 template renderer with generated-file headers
# 0.1.0 - Initial release
#         - Ring graph, plan builder and generator matrix
#         - Method pipeline with CRUD restructuring
