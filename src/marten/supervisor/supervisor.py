"""Owns the single csharp-ls session and its lifecycle."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Union

from lsprotocol import types as lsp
from lsprotocol.converters import get_converter

from ..bootstrap import resolve_server_binary
from ..config import MartenConfig
from ..discovery import SolutionDescriptor
from ..errors import ClientStartFailed, DescriptorNotFound, MartenError
from ..runtime import ToolchainGuard
from ..state import WorkspaceState
from ..utils.path import is_within_directory, relative_solution_argument
from .client import CSharpLanguageClient, LanguageClient

logger = logging.getLogger(__name__)

METADATA_REQUEST = "csharp/metadata"

_converter = get_converter()


class SupervisorState(Enum):
    """Lifecycle state of the supervised server."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


@dataclass
class ServerSession:
    """The live server: which solution it serves and the client talking to it."""

    solution: SolutionDescriptor
    client: LanguageClient
    command: List[str]
    cwd: str
    started_at: float = field(default_factory=time.time)


class ServerSupervisor:
    """Starts, stops and restarts the one language server.

    At most one client exists at any time: ``start`` always stops the
    previous session before doing anything else, and any failure while
    starting tears down what was created and leaves the supervisor STOPPED.

    Lifecycle calls must not overlap; MartenServer serializes them.
    """

    def __init__(
        self,
        config: MartenConfig,
        workspace_state: WorkspaceState,
        workspace_folders: Sequence[str],
        guard: Optional[ToolchainGuard] = None,
        client_factory: Callable[[], LanguageClient] = CSharpLanguageClient,
        binary_resolver: Callable[[MartenConfig], Awaitable[str]] = resolve_server_binary,
    ) -> None:
        self.config = config
        self.workspace_state = workspace_state
        self.workspace_folders = list(workspace_folders)
        self.guard = guard or ToolchainGuard(config.dotnet.path, config.dotnet.min_major)
        self.client_factory = client_factory
        self.binary_resolver = binary_resolver
        self._session: Optional[ServerSession] = None
        self._state = SupervisorState.STOPPED

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def current_solution(self) -> Optional[SolutionDescriptor]:
        """Solution bound to the live session, if any."""
        return self._session.solution if self._session else None

    @property
    def session(self) -> Optional[ServerSession]:
        return self._session

    def is_running(self) -> bool:
        return self._state is SupervisorState.RUNNING

    def workspace_root_for(self, solution: SolutionDescriptor) -> str:
        """Workspace folder the server runs in.

        The folder containing the solution, else the first workspace folder,
        else the solution's own directory.
        """
        for folder in self.workspace_folders:
            if is_within_directory(folder, solution.path):
                return folder
        if self.workspace_folders:
            return self.workspace_folders[0]
        return solution.directory

    def build_arguments(self, solution: SolutionDescriptor, root: str) -> List[str]:
        """Command-line arguments for csharp-ls-vs."""
        args = ["--solution", relative_solution_argument(solution.path, root)]

        msbuild = self.config.msbuild
        if msbuild.executable:
            args += ["--msbuildexepath", msbuild.executable]
        elif msbuild.path:
            args += ["--msbuildpath", msbuild.path]
        return args

    async def start(self, solution: Union[str, SolutionDescriptor]) -> None:
        """Start a server bound to ``solution``, replacing any running one.

        Raises:
            ToolchainMissing, ToolchainVersionUnparseable, ToolchainTooOld:
                If the dotnet runtime check fails
            BinaryInstallFailed: If the server binary cannot be installed
            DescriptorNotFound: If the solution file does not exist
            ClientStartFailed: If the process cannot be launched or initialized
        """
        if isinstance(solution, str):
            solution = SolutionDescriptor(solution)

        await self.stop()

        self._state = SupervisorState.STARTING
        client: Optional[LanguageClient] = None
        try:
            await self.guard.ensure_available()
            binary = await self.binary_resolver(self.config)

            if not os.path.isfile(solution.path):
                raise DescriptorNotFound(solution.path)

            root = self.workspace_root_for(solution)
            args = self.build_arguments(solution, root)
            logger.info(f"Starting {binary} {' '.join(args)} (cwd={root})")

            client = self.client_factory()
            client.on_exit = lambda code, c=client: self._client_exited(c, code)
            try:
                await client.start(binary, args, cwd=root, root_uri=Path(root).absolute().as_uri())
            except MartenError:
                raise
            except Exception as e:
                raise ClientStartFailed(binary, e) from e
        except Exception:
            if client is not None:
                await self._dispose(client)
            self._state = SupervisorState.STOPPED
            raise

        self._session = ServerSession(
            solution=solution,
            client=client,
            command=[binary, *args],
            cwd=root,
        )
        self._state = SupervisorState.RUNNING
        self.workspace_state.remember_solution(solution.path)
        logger.info(f"Language server running for {solution.path}")

    async def stop(self) -> None:
        """Shut down the running server; no-op when nothing runs."""
        session, self._session = self._session, None
        if session is None:
            self._state = SupervisorState.STOPPED
            return

        logger.info(f"Stopping language server for {session.solution.path}")
        try:
            await session.client.stop()
        finally:
            self._state = SupervisorState.STOPPED

    async def restart(self, solution: Union[str, SolutionDescriptor]) -> None:
        await self.stop()
        await self.start(solution)

    def terminate(self) -> None:
        """Kill the running server without awaiting; for exit paths."""
        session, self._session = self._session, None
        self._state = SupervisorState.STOPPED
        if session is not None:
            logger.info(f"Terminating language server for {session.solution.path}")
            session.client.terminate()

    def _client_exited(self, client: LanguageClient, returncode: Optional[int]) -> None:
        """Drop the session when its server process dies on its own."""
        if self._session is None or self._session.client is not client:
            return
        logger.warning(
            f"Language server for {self._session.solution.path} exited unexpectedly "
            f"(code {returncode})"
        )
        self._session = None
        self._state = SupervisorState.STOPPED

    async def _dispose(self, client: LanguageClient) -> None:
        try:
            await client.stop()
        except Exception as e:
            logger.warning(f"Failed to clean up language client after failed start: {e}")

    # Requests forwarded to the live server

    async def send_request(self, method: str, params: Any) -> Any:
        """Forward a request; returns None when no server is running."""
        if self._session is None or not self.is_running():
            return None
        return await self._session.client.send_request(method, params)

    async def request_metadata(self, uri: str) -> str:
        """Decompiled source for a read-only ``csharp:`` document, "" if unavailable."""
        response = await self.send_request(
            METADATA_REQUEST, {"textDocument": {"uri": uri}}
        )
        if response is None:
            return ""
        if isinstance(response, dict):
            return response.get("source") or ""
        return getattr(response, "source", None) or ""

    async def find_references(self, uri: str, position: lsp.Position) -> List[lsp.Location]:
        """textDocument/references at a position, including the declaration."""
        params = lsp.ReferenceParams(
            text_document=lsp.TextDocumentIdentifier(uri=uri),
            position=position,
            context=lsp.ReferenceContext(include_declaration=True),
        )
        response = await self.send_request(lsp.TEXT_DOCUMENT_REFERENCES, params)
        if not response:
            return []
        return [
            loc if isinstance(loc, lsp.Location) else _converter.structure(loc, lsp.Location)
            for loc in response
        ]
