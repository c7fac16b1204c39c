"""Path helpers for comparing and relativizing solution and source paths."""

from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Union

_URI_DRIVE_PREFIX = re.compile(r"^[/\\]([A-Za-z]:)(?=[/\\]|$)")


def strip_uri_drive_prefix(path: str) -> str:
    """Rewrite a URI-style drive path (``/c:/src``) to its native form (``c:/src``).

    Examples:
        >>> strip_uri_drive_prefix("/c:/src/App.sln")
        'c:/src/App.sln'

        >>> strip_uri_drive_prefix("/home/me/App.sln")
        '/home/me/App.sln'
    """
    return _URI_DRIVE_PREFIX.sub(r"\1", path, count=1)


def normalize_path(path: Union[str, Path]) -> str:
    """Return the canonical form of a path, used only for equality checks.

    The canonical form is lower-cased, uses forward slashes, has ``.`` and
    ``..`` segments collapsed and carries no trailing separator. No
    filesystem access happens here, so two spellings of the same location
    compare equal even when the location does not exist.

    Args:
        path: Raw path, possibly Windows-style or URI-style

    Returns:
        Canonical string form

    Examples:
        >>> normalize_path("C:\\\\Work\\\\App.sln") == normalize_path("/c:/work/app.sln")
        True
    """
    return _clean_path(path).lower()


def _clean_path(path: Union[str, Path]) -> str:
    """Forward slashes, collapsed dot segments, no trailing separator; case kept."""
    text = strip_uri_drive_prefix(str(path)).replace("\\", "/")
    if not text:
        return ""
    return posixpath.normpath(text)


def is_within_directory(directory: Union[str, Path], path: Union[str, Path]) -> bool:
    """Case-insensitive check that ``path`` lies inside ``directory``.

    The comparison happens on canonical forms and respects segment
    boundaries, so ``/ws/a`` does not contain ``/ws/ab/file.cs``.
    """
    canonical_dir = normalize_path(directory)
    canonical_path = normalize_path(path)
    if not canonical_dir:
        return False
    if canonical_dir.endswith("/"):
        return canonical_path.startswith(canonical_dir)
    return canonical_path == canonical_dir or canonical_path.startswith(canonical_dir + "/")


def resolve_workspace_path(
    path: Union[str, Path],
    project_root: Union[str, Path],
) -> Path:
    """Resolve a path relative to the project workspace.

    Absolute paths are returned resolved; relative paths are anchored at
    ``project_root``.

    Examples:
        >>> resolve_workspace_path("src/Program.cs", "/project")
        Path("/project/src/Program.cs")
    """
    path_obj = Path(path)
    if path_obj.is_absolute():
        return path_obj.resolve()
    return (Path(project_root).resolve() / path_obj).resolve()


def relative_solution_argument(
    solution_path: Union[str, Path],
    root_path: Union[str, Path],
) -> str:
    """Express a solution path the way it is handed to ``--solution``.

    Solutions under ``root_path`` become root-relative; anything else stays
    absolute.

    Examples:
        >>> relative_solution_argument("/ws/app/App.sln", "/ws")
        'app/App.sln'

        >>> relative_solution_argument("/other/App.sln", "/ws")
        '/other/App.sln'
    """
    solution = str(solution_path)
    root = str(root_path)
    if not root or not is_within_directory(root, solution):
        return solution
    # Slice the cleaned forms: the raw root may carry dot segments or a
    # trailing separator the containment check ignored
    clean_solution = _clean_path(solution)
    relative = clean_solution[len(_clean_path(root)):].lstrip("/")
    if not relative:
        return solution
    if "\\" in solution:
        relative = relative.replace("/", "\\")
    return relative
