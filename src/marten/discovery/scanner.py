"""Workspace-wide solution discovery."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable, List, Sequence

from ..errors import ScanFailed
from .types import SolutionDescriptor, is_solution_file

logger = logging.getLogger(__name__)

# Version control, IDE state, dependency and build output directories
DEFAULT_EXCLUDED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        ".vs",
        "node_modules",
        "packages",
        "bin",
        "obj",
    }
)


def unique_descriptors(paths: Iterable[str]) -> List[SolutionDescriptor]:
    """Build descriptors from raw paths, keeping the first of each canonical form."""
    seen = set()
    unique: List[SolutionDescriptor] = []
    for path in paths:
        descriptor = SolutionDescriptor(path)
        if descriptor in seen:
            continue
        seen.add(descriptor)
        unique.append(descriptor)
    return unique


class SolutionScanner:
    """Finds every solution file under the workspace folders.

    Results come back in a stable order: folders as given, then a sorted
    depth-first walk inside each folder.
    """

    def __init__(
        self,
        workspace_folders: Sequence[str],
        exclude: Iterable[str] = (),
    ) -> None:
        self.workspace_folders = list(workspace_folders)
        self.excluded_dirs = DEFAULT_EXCLUDED_DIRS | {name.lower() for name in exclude}

    async def scan(self) -> List[SolutionDescriptor]:
        """Scan all workspace folders.

        Returns:
            Unique descriptors in scan order; empty when none exist
        """
        loop = asyncio.get_running_loop()
        found: List[str] = []

        for folder in self.workspace_folders:
            try:
                paths = await loop.run_in_executor(None, self._scan_folder, folder)
            except ScanFailed as e:
                logger.warning(f"Skipping workspace folder: {e}")
                continue
            found.extend(paths)

        descriptors = unique_descriptors(found)
        logger.debug(f"Found {len(descriptors)} solution(s): {[d.path for d in descriptors]}")
        return descriptors

    def _scan_folder(self, folder: str) -> List[str]:
        """Walk one folder synchronously (runs in the default executor).

        Raises:
            ScanFailed: If the folder itself cannot be listed
        """
        if not os.path.isdir(folder):
            raise ScanFailed(folder, NotADirectoryError(folder))

        def on_error(error: OSError) -> None:
            logger.warning(str(ScanFailed(error.filename or folder, error)))

        results: List[str] = []
        for root, dirs, files in os.walk(folder, onerror=on_error):
            dirs[:] = sorted(d for d in dirs if d.lower() not in self.excluded_dirs)
            for name in sorted(files):
                if is_solution_file(name):
                    results.append(os.path.join(root, name))
        return results
