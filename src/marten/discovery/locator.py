"""Find the solution governing a given source file."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Optional, Sequence

from ..utils.path import is_within_directory, normalize_path
from .scanner import SolutionScanner
from .types import SolutionDescriptor, is_solution_file

logger = logging.getLogger(__name__)


def find_ancestor_solution(file_path: str) -> Optional[str]:
    """Walk upward from the file's directory and return the closest solution.

    Within one directory the first solution by name wins. The walk ends at
    the filesystem root or at the first directory that cannot be listed.
    """
    directory = os.path.dirname(os.path.abspath(file_path))
    while True:
        try:
            entries = sorted(os.listdir(directory))
        except OSError as e:
            logger.debug(f"Stopping upward search at {directory}: {e}")
            return None

        for name in entries:
            candidate = os.path.join(directory, name)
            if is_solution_file(name) and os.path.isfile(candidate):
                return candidate

        parent = os.path.dirname(directory)
        if parent == directory:
            return None
        directory = parent


def pick_enclosing_solution(
    file_path: str,
    candidates: Sequence[SolutionDescriptor],
) -> Optional[SolutionDescriptor]:
    """Choose among workspace-wide candidates for a file.

    A single candidate is returned as is. Otherwise the candidate whose
    directory encloses the file (case-insensitively) most closely wins;
    ties go to the earlier candidate.
    """
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    enclosing = [c for c in candidates if is_within_directory(c.directory, file_path)]
    if not enclosing:
        return None
    return max(enclosing, key=lambda c: len(normalize_path(c.directory)))


class SolutionLocator:
    """Resolves the governing solution for source files."""

    def __init__(self, scanner: SolutionScanner) -> None:
        self.scanner = scanner

    async def locate(self, file_path: str) -> Optional[SolutionDescriptor]:
        """Find the solution for ``file_path``.

        Args:
            file_path: Source file being opened

        Returns:
            The governing SolutionDescriptor, or None if none can be determined
        """
        loop = asyncio.get_running_loop()
        ancestor = await loop.run_in_executor(None, find_ancestor_solution, file_path)
        if ancestor:
            logger.debug(f"Found ancestor solution for {file_path}: {ancestor}")
            return SolutionDescriptor(ancestor)

        candidates = await self.scanner.scan()
        chosen = pick_enclosing_solution(file_path, candidates)
        if chosen is None:
            logger.debug(f"No solution governs {file_path}")
        return chosen
