"""Runtime prerequisite checks for the language server."""

from .guard import ToolchainGuard
from .specs import DOTNET_SPEC, RuntimeSpec
from .types import ToolchainVersion

__all__ = [
    "ToolchainGuard",
    "ToolchainVersion",
    "RuntimeSpec",
    "DOTNET_SPEC",
]
