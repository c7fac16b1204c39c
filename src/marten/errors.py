"""Exceptions raised while discovering solutions and supervising csharp-ls."""

from __future__ import annotations

from typing import Optional


class MartenError(Exception):
    """Base class for every error surfaced to the user by Marten."""


class ToolchainMissing(MartenError):
    """Raised when the dotnet runtime cannot be executed."""

    def __init__(self, executable: str, detail: Optional[str] = None):
        self.executable = executable
        self.detail = detail
        message = (
            f"Failed to get dotnet version. Make sure dotnet is installed and "
            f"'{executable}' is on PATH"
        )
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ToolchainVersionUnparseable(MartenError):
    """Raised when `dotnet --version` prints something that is not a version."""

    def __init__(self, output: str):
        self.output = output
        super().__init__(f"Failed to parse dotnet version: {output!r}")


class ToolchainTooOld(MartenError):
    """Raised when the installed dotnet runtime is below the supported major."""

    def __init__(self, version: str, required_major: int):
        self.version = version
        self.required_major = required_major
        super().__init__(
            f"csharp-ls requires dotnet version {required_major}.0 or higher. "
            f"Current version is {version}"
        )


class BinaryInstallFailed(MartenError):
    """Raised when `dotnet tool install` cannot provide the server binary."""

    def __init__(self, package: str, detail: str):
        self.package = package
        self.detail = detail
        super().__init__(f"Failed to install {package}: {detail}")


class DescriptorNotFound(MartenError):
    """Raised when the solution handed to the supervisor does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Solution file not found: {path}")


class ScanFailed(MartenError):
    """Raised for a directory that cannot be enumerated during discovery.

    Discovery never lets this escape; it is logged and the directory counts
    as holding no solutions.
    """

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot list {path}: {cause}")


class ClientStartFailed(MartenError):
    """Raised when the language client fails to launch or initialize."""

    def __init__(self, command: str, cause: BaseException):
        self.command = command
        self.cause = cause
        super().__init__(
            f"Language server '{command}' failed to start: "
            f"{type(cause).__name__}: {cause}"
        )


__all__ = [
    "MartenError",
    "ToolchainMissing",
    "ToolchainVersionUnparseable",
    "ToolchainTooOld",
    "BinaryInstallFailed",
    "DescriptorNotFound",
    "ScanFailed",
    "ClientStartFailed",
]
