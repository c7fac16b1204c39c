"""Bootstrap utilities for providing the language server binary."""

from .server_installer import (
    SERVER_PACKAGE,
    ServerBinaryInfo,
    ServerBinaryStatus,
    check_server_binary,
    describe_server_binary,
    install_server_binary,
    installed_versions,
    resolve_server_binary,
)

__all__ = [
    "SERVER_PACKAGE",
    "ServerBinaryInfo",
    "ServerBinaryStatus",
    "check_server_binary",
    "describe_server_binary",
    "install_server_binary",
    "installed_versions",
    "resolve_server_binary",
]
