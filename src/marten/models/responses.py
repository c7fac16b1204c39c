from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


@dataclass
class SolutionInfo:
    path: str
    name: str
    relative_path: str  # Relative to the first workspace folder when inside it
    is_active: bool = False  # Bound to the running server
    is_remembered: bool = False  # Stored as the workspace's last solution


@dataclass
class MessageInfo:
    """A message the host would have shown to the user."""

    level: Literal["info", "warning", "error"]
    text: str
    actions: List[str] = field(default_factory=list)
    answer: Optional[str] = None  # Action that was taken, if any


@dataclass
class ToolchainInfo:
    executable: str
    available: bool
    version: Optional[str] = None
    major: Optional[int] = None
    required_major: int = 8
    error: Optional[str] = None


@dataclass
class ServerStatus:
    state: Literal["stopped", "starting", "running"]
    project_path: str
    solution: Optional[str] = None
    remembered_solution: Optional[str] = None
    command: List[str] = field(default_factory=list)
    cwd: Optional[str] = None
    uptime_seconds: Optional[float] = None
    server_binary: Optional[str] = None  # None until installed
    installed_versions: List[str] = field(default_factory=list)
    toolchain: Optional[ToolchainInfo] = None


@dataclass
class CommandResult:
    """Outcome of a user-facing command."""

    state: Literal["stopped", "starting", "running"]
    solution: Optional[str] = None
    messages: List[MessageInfo] = field(default_factory=list)
    candidates: List[SolutionInfo] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)
