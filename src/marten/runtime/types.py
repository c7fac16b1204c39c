"""Data types for runtime checks."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ToolchainVersion:
    """Result of a `dotnet --version` probe.

    Attributes:
        executable: Runtime executable that was queried
        version: Version string as printed (e.g. "8.0.100")
        major: Parsed major version
    """

    executable: str
    version: str
    major: int

    def __repr__(self) -> str:
        return f"<ToolchainVersion {self.executable} v{self.version}>"
