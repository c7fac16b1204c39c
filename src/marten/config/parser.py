"""Configuration file parser for Marten."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python 3.10

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".marten.toml"

# csharp-ls-vs release installed on first use
DEFAULT_SERVER_VERSION = "0.1.10"


@dataclass
class DotnetConfig:
    """Runtime used for the version check and for `dotnet tool install`."""

    path: str = "dotnet"
    min_major: int = 8


@dataclass
class ServerConfig:
    """csharp-ls-vs binary resolution."""

    executable: Optional[str] = None  # Developer override, skips installation
    install_dir: Optional[str] = None
    version: str = DEFAULT_SERVER_VERSION
    language_id: str = "csharp"


@dataclass
class MSBuildConfig:
    """MSBuild locations forwarded to the server."""

    executable: Optional[str] = None  # --msbuildexepath, wins over path
    path: Optional[str] = None  # --msbuildpath


@dataclass
class DiscoveryConfig:
    """Solution discovery settings."""

    exclude: List[str] = field(default_factory=list)


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class MartenConfig:
    """Complete Marten configuration."""

    dotnet: DotnetConfig = field(default_factory=DotnetConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    msbuild: MSBuildConfig = field(default_factory=MSBuildConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Project root for resolving paths
    project_root: Path = field(default_factory=Path.cwd)

    def resolve_path(self, path_template: str) -> str:
        """Resolve template variables in paths.

        Supports:
            ${PROJECT_ROOT} - absolute path to project root
            ~ - user home directory
        """
        result = path_template.replace("${PROJECT_ROOT}", str(self.project_root))
        return os.path.expanduser(result)

    @property
    def install_root(self) -> Path:
        """Directory that receives versioned csharp-ls-vs installs."""
        if self.server.install_dir:
            return Path(self.resolve_path(self.server.install_dir))
        return Path.home() / ".marten"

    @property
    def state_dir(self) -> Path:
        """Directory holding per-workspace persisted state."""
        return self.install_root


def _optional_str(data: Dict[str, Any], key: str) -> Optional[str]:
    """Read a string setting, treating blanks as unset."""
    value = data.get(key)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _section(data: Dict[str, Any], name: str, config_file: Path) -> Dict[str, Any]:
    """Return the ``[name]`` table, or an empty one when absent or not a table."""
    section = data.get(name, {})
    if isinstance(section, dict):
        return section
    logger.warning(f"Ignoring {name} = {section!r} in {config_file}: expected a [{name}] table")
    return {}


def find_config_file(project_path: Path) -> Optional[Path]:
    """Find .marten.toml in project root.

    Args:
        project_path: Root path of the project

    Returns:
        Path to .marten.toml if found, None otherwise
    """
    config_file = Path(project_path) / CONFIG_FILE_NAME
    if config_file.exists():
        return config_file
    return None


def load_config(project_path: Path) -> MartenConfig:
    """Load configuration from .marten.toml or use defaults.

    Args:
        project_path: Root path of the project

    Returns:
        MartenConfig with loaded or default configuration
    """
    config = MartenConfig(project_root=Path(project_path))

    config_file = find_config_file(project_path)
    if not config_file:
        return config

    try:
        with open(config_file, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable {config_file}: {e}")
        return config

    dotnet_data = _section(data, "dotnet", config_file)
    dotnet_path = _optional_str(dotnet_data, "path")
    if dotnet_path:
        config.dotnet.path = config.resolve_path(dotnet_path)
    min_major = dotnet_data.get("min_major", config.dotnet.min_major)
    if isinstance(min_major, int) and not isinstance(min_major, bool):
        config.dotnet.min_major = min_major
    else:
        logger.warning(f"Ignoring [dotnet] min_major = {min_major!r} in {config_file}: expected an integer")

    server_data = _section(data, "server", config_file)
    executable = _optional_str(server_data, "executable")
    config.server.executable = config.resolve_path(executable) if executable else None
    config.server.install_dir = _optional_str(server_data, "install_dir")
    config.server.version = _optional_str(server_data, "version") or DEFAULT_SERVER_VERSION
    config.server.language_id = _optional_str(server_data, "language_id") or "csharp"

    msbuild_data = _section(data, "msbuild", config_file)
    config.msbuild.executable = _optional_str(msbuild_data, "executable")
    config.msbuild.path = _optional_str(msbuild_data, "path")

    exclude = _section(data, "discovery", config_file).get("exclude", [])
    if isinstance(exclude, list) and all(isinstance(name, str) for name in exclude):
        config.discovery.exclude = list(exclude)
    else:
        logger.warning(f"Ignoring [discovery] exclude in {config_file}: expected a list of names")

    level = _section(data, "logging", config_file).get("level", config.logging.level)
    if isinstance(level, str) and level.strip():
        config.logging.level = level.strip().upper()
    else:
        logger.warning(f"Ignoring [logging] level = {level!r} in {config_file}")

    return config
