"""Unit tests for the language server supervisor."""

import os

import pytest
from lsprotocol import types as lsp

from marten.config import MartenConfig
from marten.discovery import SolutionDescriptor
from marten.errors import (
    BinaryInstallFailed,
    ClientStartFailed,
    DescriptorNotFound,
    ToolchainTooOld,
)
from marten.state import WorkspaceState
from marten.supervisor import METADATA_REQUEST, ServerSupervisor, SupervisorState


@pytest.fixture
def supervisor(temp_workspace, state_dir, client_factory, guard, binary_resolver):
    config = MartenConfig(project_root=temp_workspace)
    return ServerSupervisor(
        config,
        WorkspaceState(temp_workspace, state_dir),
        [str(temp_workspace)],
        guard=guard,
        client_factory=client_factory,
        binary_resolver=binary_resolver,
    )


def _solution(workspace, *parts):
    return os.path.join(str(workspace), *parts)


class TestStart:
    @pytest.mark.asyncio
    async def test_start_runs_and_remembers(self, supervisor, temp_workspace, client_factory):
        app = _solution(temp_workspace, "app", "App.sln")
        await supervisor.start(app)

        assert supervisor.state is SupervisorState.RUNNING
        assert supervisor.current_solution == SolutionDescriptor(app)
        assert supervisor.workspace_state.last_solution == app

        command, args, cwd, root_uri = client_factory.clients[0].started_with
        assert command == "/opt/csharp-ls-vs/csharp-ls-vs"
        assert args == ["--solution", "app/App.sln"]
        assert cwd == str(temp_workspace)
        assert root_uri == temp_workspace.as_uri()

    @pytest.mark.asyncio
    async def test_start_while_running_keeps_one_client(self, supervisor, temp_workspace, client_factory):
        await supervisor.start(_solution(temp_workspace, "app", "App.sln"))
        await supervisor.start(_solution(temp_workspace, "lib", "Lib.slnx"))

        assert len(client_factory.clients) == 2
        assert client_factory.clients[0].stopped
        assert client_factory.live == [client_factory.clients[1]]
        assert supervisor.current_solution.name == "Lib.slnx"

    @pytest.mark.asyncio
    async def test_restart_same_solution(self, supervisor, temp_workspace, client_factory):
        app = _solution(temp_workspace, "app", "App.sln")
        await supervisor.start(app)
        await supervisor.restart(app)

        assert len(client_factory.live) == 1
        assert supervisor.is_running()

    @pytest.mark.asyncio
    async def test_toolchain_too_old_leaves_stopped(self, supervisor, temp_workspace, client_factory, guard):
        guard.ensure_available.side_effect = ToolchainTooOld("7.0.410", 8)

        with pytest.raises(ToolchainTooOld):
            await supervisor.start(_solution(temp_workspace, "app", "App.sln"))

        assert not supervisor.is_running()
        assert supervisor.state is SupervisorState.STOPPED
        assert client_factory.clients == []
        assert supervisor.workspace_state.last_solution is None

        # Stopping afterwards is a no-op
        await supervisor.stop()
        assert supervisor.state is SupervisorState.STOPPED

    @pytest.mark.asyncio
    async def test_failed_start_stops_previous_server(self, supervisor, temp_workspace, client_factory, guard):
        await supervisor.start(_solution(temp_workspace, "app", "App.sln"))
        guard.ensure_available.side_effect = ToolchainTooOld("7.0.410", 8)

        with pytest.raises(ToolchainTooOld):
            await supervisor.start(_solution(temp_workspace, "lib", "Lib.slnx"))

        assert client_factory.live == []
        assert supervisor.current_solution is None

    @pytest.mark.asyncio
    async def test_binary_install_failure(self, supervisor, temp_workspace, binary_resolver, client_factory):
        binary_resolver.side_effect = BinaryInstallFailed("csharp-ls-vs", "exit code 1")

        with pytest.raises(BinaryInstallFailed):
            await supervisor.start(_solution(temp_workspace, "app", "App.sln"))

        assert supervisor.state is SupervisorState.STOPPED
        assert client_factory.clients == []

    @pytest.mark.asyncio
    async def test_missing_solution(self, supervisor, temp_workspace, client_factory):
        with pytest.raises(DescriptorNotFound) as exc_info:
            await supervisor.start(_solution(temp_workspace, "gone", "Gone.sln"))

        assert exc_info.value.path.endswith("Gone.sln")
        assert client_factory.clients == []
        assert supervisor.state is SupervisorState.STOPPED

    @pytest.mark.asyncio
    async def test_client_failure_is_wrapped_and_cleaned_up(self, supervisor, temp_workspace, client_factory):
        client_factory.fail_with = ConnectionResetError("server exited")

        with pytest.raises(ClientStartFailed) as exc_info:
            await supervisor.start(_solution(temp_workspace, "app", "App.sln"))

        assert isinstance(exc_info.value.cause, ConnectionResetError)
        assert client_factory.live == []
        assert client_factory.clients[0].stopped
        assert supervisor.state is SupervisorState.STOPPED


class TestStop:
    @pytest.mark.asyncio
    async def test_stop_without_server(self, supervisor):
        await supervisor.stop()
        assert supervisor.state is SupervisorState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_keeps_remembered_choice(self, supervisor, temp_workspace, client_factory):
        app = _solution(temp_workspace, "app", "App.sln")
        await supervisor.start(app)
        await supervisor.stop()

        assert client_factory.live == []
        assert supervisor.session is None
        assert supervisor.workspace_state.last_solution == app


class TestArguments:
    def test_msbuild_executable_wins(self, supervisor, temp_workspace):
        supervisor.config.msbuild.executable = "/opt/msbuild/MSBuild.dll"
        supervisor.config.msbuild.path = "/opt/msbuild"
        solution = SolutionDescriptor(_solution(temp_workspace, "app", "App.sln"))

        args = supervisor.build_arguments(solution, str(temp_workspace))
        assert args == ["--solution", "app/App.sln", "--msbuildexepath", "/opt/msbuild/MSBuild.dll"]

    def test_msbuild_path(self, supervisor, temp_workspace):
        supervisor.config.msbuild.path = "/opt/msbuild"
        solution = SolutionDescriptor(_solution(temp_workspace, "app", "App.sln"))

        args = supervisor.build_arguments(solution, str(temp_workspace))
        assert args == ["--solution", "app/App.sln", "--msbuildpath", "/opt/msbuild"]

    def test_solution_outside_workspace_is_absolute(self, supervisor):
        solution = SolutionDescriptor("/elsewhere/Other.sln")
        assert supervisor.workspace_root_for(solution) == supervisor.workspace_folders[0]
        args = supervisor.build_arguments(solution, supervisor.workspace_folders[0])
        assert args == ["--solution", "/elsewhere/Other.sln"]

    def test_root_without_workspace_folders(self, supervisor):
        supervisor.workspace_folders = []
        solution = SolutionDescriptor("/elsewhere/Other.sln")
        assert supervisor.workspace_root_for(solution) == "/elsewhere"


class TestRequests:
    @pytest.mark.asyncio
    async def test_requests_without_server(self, supervisor, client_factory):
        assert await supervisor.send_request("workspace/symbol", {}) is None
        assert await supervisor.request_metadata("csharp:/metadata/System.String.cs") == ""
        assert await supervisor.find_references("file:///x.cs", lsp.Position(line=0, character=0)) == []
        assert client_factory.requests == []

    @pytest.mark.asyncio
    async def test_metadata(self, supervisor, temp_workspace, client_factory):
        client_factory.responses[METADATA_REQUEST] = {
            "projectName": "System.Runtime",
            "source": "namespace System { public sealed class String {} }",
        }
        await supervisor.start(_solution(temp_workspace, "app", "App.sln"))

        source = await supervisor.request_metadata("csharp:/metadata/System.String.cs")

        assert "class String" in source
        method, params = client_factory.requests[0]
        assert method == "csharp/metadata"
        assert params == {"textDocument": {"uri": "csharp:/metadata/System.String.cs"}}

    @pytest.mark.asyncio
    async def test_find_references_structures_dicts(self, supervisor, temp_workspace, client_factory):
        client_factory.responses[lsp.TEXT_DOCUMENT_REFERENCES] = [
            {
                "uri": "file:///ws/app/A.cs",
                "range": {
                    "start": {"line": 3, "character": 4},
                    "end": {"line": 3, "character": 9},
                },
            }
        ]
        await supervisor.start(_solution(temp_workspace, "app", "App.sln"))

        locations = await supervisor.find_references(
            "file:///ws/app/A.cs", lsp.Position(line=1, character=2)
        )

        assert len(locations) == 1
        assert isinstance(locations[0], lsp.Location)
        assert locations[0].range.start.line == 3

        method, params = client_factory.requests[0]
        assert method == "textDocument/references"
        assert params.context.include_declaration is True


class TestServerExit:
    @pytest.mark.asyncio
    async def test_crash_returns_to_stopped(self, supervisor, temp_workspace, client_factory):
        await supervisor.start(_solution(temp_workspace, "app", "App.sln"))

        client_factory.clients[0].crash(returncode=134)

        assert supervisor.state is SupervisorState.STOPPED
        assert not supervisor.is_running()
        assert supervisor.session is None
        assert await supervisor.send_request("workspace/symbol", {}) is None

    @pytest.mark.asyncio
    async def test_exit_of_replaced_client_is_ignored(self, supervisor, temp_workspace, client_factory):
        await supervisor.start(_solution(temp_workspace, "app", "App.sln"))
        await supervisor.start(_solution(temp_workspace, "lib", "Lib.slnx"))

        # pygls reports the old process exiting after a regular stop
        client_factory.clients[0].crash(returncode=0)

        assert supervisor.is_running()
        assert supervisor.current_solution.name == "Lib.slnx"

    @pytest.mark.asyncio
    async def test_terminate_kills_without_awaiting(self, supervisor, temp_workspace, client_factory):
        await supervisor.start(_solution(temp_workspace, "app", "App.sln"))

        supervisor.terminate()

        assert client_factory.clients[0].terminated
        assert client_factory.live == []
        assert supervisor.state is SupervisorState.STOPPED
        # Nothing left to stop
        supervisor.terminate()
        await supervisor.stop()
