"""Data types for solution discovery."""

import ntpath
from dataclasses import dataclass, field

from ..utils.path import normalize_path

SOLUTION_EXTENSIONS = (".sln", ".slnx")


def is_solution_file(name: str) -> bool:
    """True for file names carrying a solution extension (any casing)."""
    return name.lower().endswith(SOLUTION_EXTENSIONS)


@dataclass(frozen=True)
class SolutionDescriptor:
    """A solution file found on disk.

    Identity is the canonical form: two descriptors whose paths differ only
    in casing or separator style are equal and hash alike.

    Attributes:
        path: Path as discovered (kept for display and for launching)
        canonical: Normalized path used for equality and deduplication
    """

    path: str = field(compare=False)
    canonical: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "canonical", normalize_path(self.path))

    @property
    def name(self) -> str:
        return ntpath.basename(self.path)

    @property
    def directory(self) -> str:
        """Directory containing the solution, in the discovered spelling.

        Both separator styles are understood on every platform.
        """
        return ntpath.dirname(self.path)

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"<SolutionDescriptor {self.path}>"
