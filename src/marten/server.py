from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Any, List, Optional

from .activation import ActivationPolicy
from .bootstrap import describe_server_binary, installed_versions
from .commands import show_references_command
from .config import load_config
from .discovery import SolutionDescriptor, SolutionLocator, SolutionScanner
from .errors import MartenError
from .host import Host, ToolHost
from .models.responses import (
    CommandResult,
    MessageInfo,
    ServerStatus,
    SolutionInfo,
    ToolchainInfo,
)
from .state import WorkspaceState
from .supervisor import ServerSupervisor
from .utils.path import relative_solution_argument, resolve_workspace_path

logger = logging.getLogger(__name__)


class MartenServer:
    """Facade wiring discovery, supervision and activation for one workspace."""

    def __init__(self, project_path: Optional[str] = None, host: Optional[Host] = None) -> None:
        self.project_path = str(Path(project_path or os.getcwd()).resolve())
        self.config = load_config(Path(self.project_path))

        self.host = host or ToolHost([self.project_path])
        folders = self.host.workspace_folders

        self.workspace_state = WorkspaceState(self.project_path, self.config.state_dir)
        self.scanner = SolutionScanner(folders, exclude=self.config.discovery.exclude)
        self.locator = SolutionLocator(self.scanner)
        self.supervisor = ServerSupervisor(self.config, self.workspace_state, folders)
        self.policy = ActivationPolicy(
            supervisor=self.supervisor,
            scanner=self.scanner,
            locator=self.locator,
            workspace_state=self.workspace_state,
            host=self.host,
            language_id=self.config.server.language_id,
        )

        if isinstance(self.host, ToolHost) and self.host.reference_provider is None:
            self.host.reference_provider = self.supervisor.find_references

        # Lifecycle commands may arrive concurrently; the supervisor needs them serialized
        self._lifecycle_lock = asyncio.Lock()

    async def start(
        self,
        active_document: Optional[str] = None,
        active_language_id: Optional[str] = None,
    ) -> None:
        """Run initial activation (autostart)."""
        async with self._lifecycle_lock:
            await self.policy.activate(active_document, active_language_id)

    async def stop(self) -> None:
        async with self._lifecycle_lock:
            await self.supervisor.stop()

    def terminate(self) -> None:
        """Kill the language server from a context that cannot await."""
        self.supervisor.terminate()

    # Commands

    async def list_solutions(self) -> List[SolutionInfo]:
        solutions = await self.scanner.scan()
        return [self._solution_info(s) for s in solutions]

    async def select_solution(self, solution: Optional[str] = None) -> CommandResult:
        """Load ``solution`` directly, or report the candidates when none is given.

        An explicit path bypasses discovery, so it may point into an
        excluded folder or outside the workspace.
        """
        async with self._lifecycle_lock:
            if solution:
                path = str(resolve_workspace_path(solution, self.project_path))
                await self.policy.load_solution(path)
            else:
                await self.policy.select_solution()

        result = self._result()
        if not self.supervisor.is_running():
            result.candidates = await self.list_solutions()
        return result

    async def restart_server(self, solution: Optional[str] = None) -> CommandResult:
        target = str(resolve_workspace_path(solution, self.project_path)) if solution else None
        async with self._lifecycle_lock:
            await self.policy.restart_server(target)
        return self._result()

    async def stop_server(self) -> CommandResult:
        async with self._lifecycle_lock:
            await self.supervisor.stop()
        return self._result()

    async def open_document(self, path: str, language_id: str = "csharp") -> CommandResult:
        file_path = str(resolve_workspace_path(path, self.project_path))
        async with self._lifecycle_lock:
            await self.policy.on_document_opened(file_path, language_id)
        return self._result()

    async def show_references(self, *args: Any) -> CommandResult:
        locations = await show_references_command(self.host, *args)
        result = self._result()
        result.data["references"] = [
            {
                "uri": loc.uri,
                "line": loc.range.start.line,
                "character": loc.range.start.character,
            }
            for loc in locations
        ]
        return result

    async def get_decompiled_source(self, uri: str) -> str:
        return await self.supervisor.request_metadata(uri)

    async def get_status(self, check_toolchain: bool = True) -> ServerStatus:
        session = self.supervisor.session
        status = ServerStatus(
            state=self.supervisor.state.value,
            project_path=self.project_path,
            solution=session.solution.path if session else None,
            remembered_solution=self.workspace_state.last_solution,
            command=list(session.command) if session else [],
            cwd=session.cwd if session else None,
            uptime_seconds=round(time.time() - session.started_at, 1) if session else None,
            server_binary=describe_server_binary(self.config),
            installed_versions=installed_versions(self.config),
        )
        if check_toolchain:
            status.toolchain = await self._toolchain_info()
        return status

    # Helpers

    async def _toolchain_info(self) -> ToolchainInfo:
        guard = self.supervisor.guard
        info = ToolchainInfo(
            executable=guard.executable,
            available=False,
            required_major=guard.min_major,
        )
        try:
            version = await guard.probe()
        except MartenError as e:
            info.error = str(e)
            return info
        info.version = version.version
        info.major = version.major
        info.available = version.major >= guard.min_major
        return info

    def _solution_info(self, solution: SolutionDescriptor) -> SolutionInfo:
        root = self.host.workspace_folders[0] if self.host.workspace_folders else ""
        remembered = self.workspace_state.last_solution
        return SolutionInfo(
            path=solution.path,
            name=solution.name,
            relative_path=relative_solution_argument(solution.path, root),
            is_active=solution == self.supervisor.current_solution,
            is_remembered=bool(remembered) and solution == SolutionDescriptor(remembered),
        )

    def _result(self) -> CommandResult:
        messages: List[MessageInfo] = []
        if isinstance(self.host, ToolHost):
            messages = [
                MessageInfo(level=m.level, text=m.text, actions=m.actions, answer=m.answer)
                for m in self.host.drain_messages()
            ]
        current = self.supervisor.current_solution
        return CommandResult(
            state=self.supervisor.state.value,
            solution=current.path if current else None,
            messages=messages,
        )


__all__ = ["MartenServer"]
