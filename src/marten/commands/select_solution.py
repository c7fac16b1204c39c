"""Interactive solution picker."""

from __future__ import annotations

import logging
import ntpath
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..discovery import SolutionDescriptor
from ..host import QuickPickItem
from ..utils.path import relative_solution_argument

if TYPE_CHECKING:
    from ..activation import ActivationPolicy

logger = logging.getLogger(__name__)


def build_pick_items(
    solutions: Sequence[SolutionDescriptor],
    workspace_root: str,
) -> List[QuickPickItem]:
    """Describe solutions relative to the workspace for the picker.

    Args:
        solutions: Discovered solutions
        workspace_root: First workspace folder ("" if there is none)

    Returns:
        One QuickPickItem per solution, in the given order
    """
    items = []
    for solution in solutions:
        display_path = relative_solution_argument(solution.path, workspace_root)
        directory = ntpath.dirname(display_path)
        items.append(
            QuickPickItem(
                label=solution.name,
                description=directory or "Root folder",
                detail=display_path,
                path=solution.path,
            )
        )
    return items


async def select_solution_command(policy: ActivationPolicy) -> Optional[SolutionDescriptor]:
    """Let the user pick a solution, remember it and start the server on it.

    Returns:
        The activated solution, or None when nothing was started
    """
    host = policy.host
    try:
        logger.debug("Select solution command triggered")
        solutions = await policy.scanner.scan()

        if not solutions:
            await host.show_warning_message("No solution files found in the workspace")
            return None

        workspace_root = host.workspace_folders[0] if host.workspace_folders else ""
        items = build_pick_items(solutions, workspace_root)

        selection = await host.show_quick_pick(items, "Select a solution file to load")
        if selection is None:
            logger.info("User cancelled solution selection")
            return None

        logger.info(f"User selected solution: {selection.path}")
    except Exception as error:
        logger.exception("Error in select solution command")
        await host.show_error_message(f"Failed to select solution: {error}")
        return None

    return await load_solution_command(policy, selection.path)


async def load_solution_command(
    policy: ActivationPolicy, path: str
) -> Optional[SolutionDescriptor]:
    """Remember and start an explicitly chosen solution.

    The path is used as given, without consulting discovery, so solutions
    in excluded folders or outside the workspace can be loaded too.

    Returns:
        The activated solution, or None when starting failed
    """
    host = policy.host
    solution = SolutionDescriptor(path)
    try:
        await host.show_information_message(f"Loading solution: {solution.name}...")
        await policy.activate_solution(solution)
        return solution
    except Exception as error:
        logger.exception("Error in select solution command")
        await host.show_error_message(f"Failed to select solution: {error}")
        return None
