"""Error taxonomy for the conversion pipeline.

Every failure a caller can observe derives from LapseError, so the CLI (or any
other surface) can catch one type and report ``str(error)``.
"""

from __future__ import annotations


class LapseError(Exception):
    """Base class for all conversion failures."""


class ValidationError(LapseError):
    """Request parameters are malformed. Raised before a workspace exists."""


class InsufficientInputError(LapseError):
    """Fewer than two usable source images."""


class ExtractionError(LapseError):
    """The source archive could not be read or unpacked."""


class EnhancementError(LapseError):
    """A single source image could not be decoded or transformed."""


class EncodingError(LapseError):
    """The video encoder failed; carries the encoder's own message."""


class CleanupError(LapseError):
    """Workspace deletion failed. Logged, never propagated past the orchestrator."""


class VideoNotFoundError(LapseError):
    """A finished video does not exist (or the name escapes the library)."""
