"""Custom exceptions used across multiple layers.

Rules:
- Only put exceptions here if they need to be raised in one layer and caught in another.
- Keep exceptions simple and focused.
- No I/O, no config loading, no complex logic.
"""

from __future__ import annotations


class LoomworkError(Exception):
    """Base class for all loomwork errors.

    ``phase`` is set by the generator that was running when the error escaped
    ("methods", "generation", "patch" or "hookup").
    """

    phase: str | None = None


class RingDefinitionError(LoomworkError):
    """Raised when a ring is constructed with an inner-ring arity that contradicts its kind."""


class PlanNotFinalError(LoomworkError):
    """Raised when a draft plan is traversed before it has been finalized.

    This is a programmer error. It is never caught by the weave loop.
    """


class TreadleDefinitionError(LoomworkError):
    """Raised by define_treadle when a declarative generator definition is incomplete."""


class GenerationFailure(LoomworkError):
    """Raised when template rendering or a method transform fails for one task."""


class UnmappedTypeError(GenerationFailure):
    """Raised when a type token has no mapping for the requested target."""

    def __init__(self, type_token: str, target: str) -> None:
        self.type_token = type_token
        self.target = target
        super().__init__(f"No {target} mapping for type '{type_token}'")


class PatchTargetMissingError(LoomworkError):
    """Raised when a patch names a file that does not exist and creation was not allowed."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        super().__init__(f"Patch target does not exist: {file_path}")


class MarkerCorruptionError(LoomworkError):
    """Raised when a file holds a start marker without its end marker (or the reverse).

    The offending marker text is carried verbatim so the user can repair the file by hand.
    """

    def __init__(self, file_path: str, marker: str, reason: str) -> None:
        self.file_path = file_path
        self.marker = marker
        self.reason = reason
        super().__init__(f"{file_path}: {reason}: {marker}")


class RegistryConsumedError(LoomworkError):
    """Raised when a block registry is used after its sweep already ran."""


class ArchitectureLoadError(LoomworkError):
    """Raised when an architecture description module cannot be loaded."""
