"""
Exception taxonomy for grid builds.

Every error is fatal to the whole build. Callers surface the message
verbatim; ``DecodeError`` carries the reference of the offending image.
"""

from __future__ import annotations


class GridComposerError(Exception):
    """Base class for all grid composer failures."""


class ConfigError(GridComposerError, ValueError):
    """Invalid grid, overlay, or export configuration."""


class DecodeError(GridComposerError):
    """A source buffer could not be decoded as a raster image."""

    def __init__(self, ref: str, reason: str | None = None) -> None:
        self.ref = ref
        self.reason = reason
        msg = f"Could not decode image '{ref}'"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class CompositeError(GridComposerError):
    """Backend failure while assembling the output canvas."""
