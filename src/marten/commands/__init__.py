"""User-facing commands."""

from .select_solution import build_pick_items, load_solution_command, select_solution_command
from .show_references import parse_reference_arguments, show_references_command

__all__ = [
    "build_pick_items",
    "select_solution_command",
    "load_solution_command",
    "parse_reference_arguments",
    "show_references_command",
]
