"""The editor-host surface Marten talks to.

Anything user-facing (messages, pickers, the reference list UI) goes
through a Host. The MCP server drives Marten with ``ToolHost``; tests use
it too.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Sequence

from lsprotocol import types as lsp

from .utils.path import normalize_path

logger = logging.getLogger(__name__)

ReferenceProvider = Callable[[str, lsp.Position], Awaitable[List[lsp.Location]]]


@dataclass
class QuickPickItem:
    """One entry in a selection list."""

    label: str
    description: str = ""
    detail: str = ""
    path: str = ""  # Full solution path behind the entry


@dataclass
class HostMessage:
    level: str  # "info", "warning", "error"
    text: str
    actions: List[str] = field(default_factory=list)
    answer: Optional[str] = None


class Host(Protocol):
    """Capabilities the surrounding editor provides."""

    workspace_folders: List[str]

    async def show_information_message(self, message: str, *actions: str) -> Optional[str]: ...

    async def show_warning_message(self, message: str, *actions: str) -> Optional[str]: ...

    async def show_error_message(self, message: str, *actions: str) -> Optional[str]: ...

    async def show_quick_pick(
        self, items: Sequence[QuickPickItem], placeholder: str
    ) -> Optional[QuickPickItem]: ...

    async def execute_reference_provider(
        self, uri: str, position: lsp.Position
    ) -> List[lsp.Location]: ...

    async def show_references(
        self, uri: str, position: lsp.Position, locations: Sequence[lsp.Location]
    ) -> None: ...

    async def wait_until_ready(self) -> None: ...


class ToolHost:
    """Non-interactive host driven by tool calls.

    Messages are recorded instead of displayed. Prompts are answered from
    presets: ``select_path`` picks the matching quick-pick entry and
    ``accept_actions`` lists the action buttons that count as clicked.
    """

    def __init__(
        self,
        workspace_folders: Sequence[str],
        reference_provider: Optional[ReferenceProvider] = None,
    ) -> None:
        self.workspace_folders = list(workspace_folders)
        self.reference_provider = reference_provider
        self.select_path: Optional[str] = None
        self.accept_actions: List[str] = []
        self.messages: List[HostMessage] = []
        self.last_quick_pick: List[QuickPickItem] = []
        self.shown_references: List[Dict[str, Any]] = []

    def _answer(self, level: str, message: str, actions: Sequence[str]) -> Optional[str]:
        answer = next((a for a in actions if a in self.accept_actions), None)
        self.messages.append(HostMessage(level, message, list(actions), answer))
        log = logger.error if level == "error" else logger.warning if level == "warning" else logger.info
        log(message)
        return answer

    async def show_information_message(self, message: str, *actions: str) -> Optional[str]:
        return self._answer("info", message, actions)

    async def show_warning_message(self, message: str, *actions: str) -> Optional[str]:
        return self._answer("warning", message, actions)

    async def show_error_message(self, message: str, *actions: str) -> Optional[str]:
        return self._answer("error", message, actions)

    async def show_quick_pick(
        self, items: Sequence[QuickPickItem], placeholder: str
    ) -> Optional[QuickPickItem]:
        self.last_quick_pick = list(items)
        if not self.select_path:
            return None
        wanted = normalize_path(self.select_path)
        for item in items:
            if normalize_path(item.path) == wanted or item.label == self.select_path:
                return item
        return None

    async def execute_reference_provider(
        self, uri: str, position: lsp.Position
    ) -> List[lsp.Location]:
        if self.reference_provider is None:
            return []
        return await self.reference_provider(uri, position)

    async def show_references(
        self, uri: str, position: lsp.Position, locations: Sequence[lsp.Location]
    ) -> None:
        self.shown_references = [
            {
                "uri": loc.uri,
                "line": loc.range.start.line,
                "character": loc.range.start.character,
            }
            for loc in locations
        ]

    async def wait_until_ready(self) -> None:
        return None

    def drain_messages(self) -> List[HostMessage]:
        """Return and forget recorded messages."""
        messages, self.messages = self.messages, []
        return messages
