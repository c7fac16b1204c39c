"""Decides when, and for which solution, the language server is started."""

from __future__ import annotations

import logging
from typing import Optional, Union

from .commands import load_solution_command, select_solution_command
from .discovery import SolutionDescriptor, SolutionLocator, SolutionScanner
from .host import Host
from .state import WorkspaceState
from .supervisor import ServerSupervisor

logger = logging.getLogger(__name__)

SELECT_SOLUTION_ACTION = "Select solution"


class ActivationPolicy:
    """Applies the solution precedence at startup and on file-open events.

    Startup: remembered solution, else the only solution in the workspace,
    else a prompt when there are several, else nothing. Opening a C# file
    while no server runs locates that file's solution. Explicit selection and
    restart go straight to the supervisor.
    """

    def __init__(
        self,
        supervisor: ServerSupervisor,
        scanner: SolutionScanner,
        locator: SolutionLocator,
        workspace_state: WorkspaceState,
        host: Host,
        language_id: str = "csharp",
    ) -> None:
        self.supervisor = supervisor
        self.scanner = scanner
        self.locator = locator
        self.workspace_state = workspace_state
        self.host = host
        self.language_id = language_id

    async def activate(
        self,
        active_document: Optional[str] = None,
        active_language_id: Optional[str] = None,
    ) -> None:
        """Initial activation.

        An already-open C# document gets its own solution first; when that
        succeeds the regular autostart is skipped. Autostart runs only after
        the host reports it is ready.
        """
        if (
            active_document
            and active_language_id == self.language_id
            and not self.supervisor.is_running()
        ):
            logger.info(f"Active C# document on activation: {active_document}")
            solution = await self.locator.locate(active_document)
            if solution is not None:
                if await self._start_reporting_errors(solution, remember=True):
                    return

        await self.host.wait_until_ready()
        await self.autostart()

    async def autostart(self) -> None:
        """Startup precedence: remembered, single, several (prompt), none."""
        remembered = self.workspace_state.last_solution
        if remembered:
            logger.info(f"Starting remembered solution {remembered}")
            await self._start_reporting_errors(SolutionDescriptor(remembered))
            return

        solutions = await self.scanner.scan()

        if len(solutions) == 1:
            logger.info(f"Starting the only solution in the workspace: {solutions[0].path}")
            await self._start_reporting_errors(solutions[0])
            return

        if len(solutions) > 1:
            answer = await self.host.show_information_message(
                "More than one solution detected", SELECT_SOLUTION_ACTION
            )
            if answer:
                await self.select_solution()
            return

        logger.info("No solution found in the workspace; waiting for a C# file to be opened")

    async def on_document_opened(self, file_path: str, language_id: str) -> None:
        """Start a server for a newly opened C# file when none is running."""
        if language_id != self.language_id:
            return
        if self.supervisor.is_running():
            return

        logger.debug(f"C# document opened: {file_path}")
        solution = await self.locator.locate(file_path)
        if solution is not None:
            logger.info(f"Auto-loading solution for opened file: {solution.path}")
            await self._start_reporting_errors(solution, remember=True)
            return

        answer = await self.host.show_information_message(
            "No solution found for this C# file. Would you like to select a solution?",
            SELECT_SOLUTION_ACTION,
        )
        if answer:
            await self.select_solution()

    async def select_solution(self) -> Optional[SolutionDescriptor]:
        """Interactive selection; see select_solution_command."""
        return await select_solution_command(self)

    async def load_solution(self, path: str) -> Optional[SolutionDescriptor]:
        """Explicit selection of a known path; see load_solution_command."""
        return await load_solution_command(self, path)

    async def activate_solution(self, solution: Union[str, SolutionDescriptor]) -> None:
        """Remember ``solution`` and start it, replacing any running server.

        Raises:
            MartenError: Whatever the supervisor raises while starting
        """
        if isinstance(solution, str):
            solution = SolutionDescriptor(solution)
        self.workspace_state.remember_solution(solution.path)
        await self.supervisor.start(solution)

    async def restart_server(
        self, solution: Union[str, SolutionDescriptor, None] = None
    ) -> None:
        """Restart on ``solution`` or the remembered one, else ask the user."""
        target = solution or self.workspace_state.last_solution
        if not target:
            await self.select_solution()
            return

        try:
            logger.info("Restarting C# Language Server...")
            await self.supervisor.restart(target)
            await self.host.show_information_message("C# Language Server restarted successfully")
        except Exception as error:
            logger.error(f"Failed to restart C# Language Server: {error}")
            await self.host.show_error_message(f"Failed to restart C# Language Server: {error}")

    async def _start_reporting_errors(
        self, solution: SolutionDescriptor, remember: bool = False
    ) -> bool:
        """Start ``solution`` and surface a failure to the user.

        Returns:
            True if the server is running afterwards
        """
        try:
            if remember:
                await self.activate_solution(solution)
            else:
                await self.supervisor.start(solution)
        except Exception as error:
            logger.error(f"Failed to start C# Language Server for {solution.path}: {error}")
            await self.host.show_error_message(f"Failed to start C# Language Server: {error}")
            return False
        return True
