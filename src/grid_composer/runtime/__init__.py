"""Runtime helpers that sit outside the composition engine."""

from .version import resolve_project_version

__all__ = ["resolve_project_version"]
