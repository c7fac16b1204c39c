"""Solution discovery: workspace scanning and per-file lookup."""

from .locator import SolutionLocator, find_ancestor_solution, pick_enclosing_solution
from .scanner import DEFAULT_EXCLUDED_DIRS, SolutionScanner, unique_descriptors
from .types import SOLUTION_EXTENSIONS, SolutionDescriptor, is_solution_file

__all__ = [
    "SolutionDescriptor",
    "SolutionScanner",
    "SolutionLocator",
    "SOLUTION_EXTENSIONS",
    "DEFAULT_EXCLUDED_DIRS",
    "is_solution_file",
    "unique_descriptors",
    "find_ancestor_solution",
    "pick_enclosing_solution",
]
