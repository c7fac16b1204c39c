"""Utility modules (path normalization and workspace-relative paths)."""

from .path import (
    is_within_directory,
    normalize_path,
    relative_solution_argument,
    resolve_workspace_path,
    strip_uri_drive_prefix,
)

__all__ = [
    "normalize_path",
    "strip_uri_drive_prefix",
    "is_within_directory",
    "resolve_workspace_path",
    "relative_solution_argument",
]
