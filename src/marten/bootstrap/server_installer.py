"""csharp-ls-vs binary resolution and installation.

Installs the language server with `dotnet tool install` into a versioned
directory the first time it is needed.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..config import MartenConfig
from ..errors import BinaryInstallFailed
from ..utils.process import shell_exec

logger = logging.getLogger(__name__)

SERVER_PACKAGE = "csharp-ls-vs"


class ServerBinaryStatus(Enum):
    """Status of the server binary."""

    OVERRIDDEN = "overridden"
    INSTALLED = "installed"
    MISSING = "missing"


@dataclass
class ServerBinaryInfo:
    """Where the server binary lives for a given configuration."""

    package: str
    version: str
    tool_dir: Path
    binary_path: Path
    status: ServerBinaryStatus = ServerBinaryStatus.MISSING

    @property
    def install_args(self) -> List[str]:
        return [
            "tool",
            "install",
            self.package,
            "--tool-path",
            str(self.tool_dir),
            "--version",
            self.version,
        ]


def _binary_name(package: str) -> str:
    if sys.platform == "win32":
        return f"{package}.exe"
    return package


def check_server_binary(config: MartenConfig) -> ServerBinaryInfo:
    """Locate the server binary without installing anything.

    Args:
        config: Marten configuration

    Returns:
        ServerBinaryInfo with status updated
    """
    if config.server.executable:
        override = Path(config.server.executable)
        return ServerBinaryInfo(
            package=SERVER_PACKAGE,
            version="dev",
            tool_dir=override.parent,
            binary_path=override,
            status=ServerBinaryStatus.OVERRIDDEN,
        )

    version = config.server.version
    tool_dir = config.install_root / f".{SERVER_PACKAGE}.{version}"
    info = ServerBinaryInfo(
        package=SERVER_PACKAGE,
        version=version,
        tool_dir=tool_dir,
        binary_path=tool_dir / _binary_name(SERVER_PACKAGE),
    )
    if info.binary_path.exists():
        info.status = ServerBinaryStatus.INSTALLED
    return info


async def install_server_binary(info: ServerBinaryInfo, dotnet: str = "dotnet") -> None:
    """Install the server binary with `dotnet tool install`.

    Args:
        info: Binary location to install into
        dotnet: dotnet executable

    Raises:
        BinaryInstallFailed: If installation fails or produces no binary
    """
    print(f"📦 Installing {info.package} {info.version}...", file=sys.stderr)
    print(f"   Into: {info.tool_dir}", file=sys.stderr)

    try:
        info.tool_dir.mkdir(parents=True, exist_ok=True)
        result = await shell_exec(dotnet, info.install_args, cwd=str(info.tool_dir))
    except OSError as e:
        print(f"❌ Failed to install {info.package}: {e}", file=sys.stderr)
        raise BinaryInstallFailed(info.package, str(e)) from e

    if result.returncode != 0:
        error_msg = (result.stderr or result.stdout).strip()[:200]
        print(f"❌ Failed to install {info.package}", file=sys.stderr)
        if error_msg:
            print(f"   Error: {error_msg}", file=sys.stderr)
        raise BinaryInstallFailed(info.package, error_msg or f"exit code {result.returncode}")

    if not info.binary_path.exists():
        raise BinaryInstallFailed(
            info.package, f"install finished but {info.binary_path} is missing"
        )

    print(f"✅ Successfully installed {info.package}", file=sys.stderr)
    info.status = ServerBinaryStatus.INSTALLED


async def resolve_server_binary(config: MartenConfig) -> str:
    """Return the server binary path, installing it on first use.

    Priority:
    1. Developer override ([server] executable)
    2. Existing versioned install under the install root
    3. Fresh `dotnet tool install`

    Raises:
        BinaryInstallFailed: If the binary has to be installed and cannot be
    """
    info = check_server_binary(config)
    if info.status == ServerBinaryStatus.MISSING:
        logger.info(f"{info.package} {info.version} not found in {info.tool_dir}")
        await install_server_binary(info, dotnet=config.dotnet.path)
    return str(info.binary_path)


def installed_versions(config: MartenConfig) -> List[str]:
    """List csharp-ls-vs versions already present under the install root."""
    root = config.install_root
    prefix = f".{SERVER_PACKAGE}."
    try:
        entries = sorted(p.name for p in root.iterdir() if p.is_dir())
    except OSError:
        return []
    return [name[len(prefix):] for name in entries if name.startswith(prefix)]


def describe_server_binary(config: MartenConfig) -> Optional[str]:
    """Binary path if it is already usable, None when an install is pending."""
    info = check_server_binary(config)
    if info.status == ServerBinaryStatus.MISSING:
        return None
    return str(info.binary_path)
