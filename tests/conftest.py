"""Pytest configuration and shared fixtures."""

import tempfile
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

from tests.helpers import FakeClientFactory


@pytest.fixture
def temp_workspace() -> Generator[Path, None, None]:
    """Create a workspace with two solutions and some noise.

    Creates:
        temp_dir/
            app/
                App.sln
                src/
                    Program.cs
                bin/Debug/Stale.sln
            lib/
                Lib.slnx
                obj/Generated.sln
            node_modules/pkg/Vendored.sln
            .git/Hidden.sln
            .marten-home/          (install_dir, persisted state)
            .marten.toml
    """
    with tempfile.TemporaryDirectory() as tmp_dir:
        root = Path(tmp_dir).resolve()

        (root / "app" / "src").mkdir(parents=True)
        (root / "app" / "App.sln").write_text("")
        (root / "app" / "src" / "Program.cs").write_text("class Program {}\n")
        (root / "app" / "bin" / "Debug").mkdir(parents=True)
        (root / "app" / "bin" / "Debug" / "Stale.sln").write_text("")

        (root / "lib" / "obj").mkdir(parents=True)
        (root / "lib" / "Lib.slnx").write_text("")
        (root / "lib" / "obj" / "Generated.sln").write_text("")

        (root / "node_modules" / "pkg").mkdir(parents=True)
        (root / "node_modules" / "pkg" / "Vendored.sln").write_text("")
        (root / ".git").mkdir()
        (root / ".git" / "Hidden.sln").write_text("")

        (root / ".marten.toml").write_text(
            '[server]\ninstall_dir = "${PROJECT_ROOT}/.marten-home"\n'
        )

        yield root


@pytest.fixture
def single_solution_workspace() -> Generator[Path, None, None]:
    """Workspace with exactly one solution at app/App.sln."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        root = Path(tmp_dir).resolve()
        (root / "app" / "src").mkdir(parents=True)
        (root / "app" / "App.sln").write_text("")
        (root / "app" / "src" / "Program.cs").write_text("class Program {}\n")
        (root / "scripts").mkdir()
        (root / "scripts" / "Tool.cs").write_text("class Tool {}\n")
        yield root


@pytest.fixture
def empty_workspace() -> Generator[Path, None, None]:
    """Workspace without any solution."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        root = Path(tmp_dir).resolve()
        (root / "Loose.cs").write_text("class Loose {}\n")
        yield root


@pytest.fixture
def state_dir() -> Generator[Path, None, None]:
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def client_factory() -> FakeClientFactory:
    return FakeClientFactory()


@pytest.fixture
def guard() -> MagicMock:
    """ToolchainGuard stand-in that passes by default."""
    stub = MagicMock()
    stub.executable = "dotnet"
    stub.min_major = 8
    stub.ensure_available = AsyncMock(return_value=None)
    return stub


@pytest.fixture
def binary_resolver() -> AsyncMock:
    return AsyncMock(return_value="/opt/csharp-ls-vs/csharp-ls-vs")
