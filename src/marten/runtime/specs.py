"""Declarative specification of the runtime csharp-ls depends on.

This is DATA, not code.
"""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class VersionCheck:
    """Configuration for checking runtime version."""
    args: List[str]
    parse: str  # Regex pattern; group 1 is the full version, group 2 the major


@dataclass(frozen=True)
class RuntimeSpec:
    """Runtime prerequisite for launching the language server."""
    display_name: str
    executable_name: str
    min_major: int
    version_check: VersionCheck
    install_hint: str


DOTNET_SPEC = RuntimeSpec(
    display_name=".NET SDK",
    executable_name="dotnet",
    min_major=8,
    version_check=VersionCheck(
        args=["--version"],
        parse=r"^\s*((\d+)[^\s]*)",
    ),
    install_hint="https://dotnet.microsoft.com/download",
)
