"""Primitive definitions (tools, prompts, resources, content) and the error taxonomy."""

from . import errors, tools

__all__ = ["errors", "tools"]
