"""Unit tests for the select-solution and show-references commands."""

import json
from unittest.mock import AsyncMock

import pytest
from lsprotocol import types as lsp

from marten.commands import (
    build_pick_items,
    parse_reference_arguments,
    show_references_command,
)
from marten.discovery import SolutionDescriptor
from marten.host import ToolHost


def _location(uri: str, line: int) -> lsp.Location:
    return lsp.Location(
        uri=uri,
        range=lsp.Range(
            start=lsp.Position(line=line, character=0),
            end=lsp.Position(line=line, character=5),
        ),
    )


class TestBuildPickItems:
    def test_items_relative_to_workspace(self):
        items = build_pick_items(
            [
                SolutionDescriptor("/ws/App.sln"),
                SolutionDescriptor("/ws/src/lib/Lib.slnx"),
                SolutionDescriptor("/other/Other.sln"),
            ],
            "/ws",
        )

        assert [i.label for i in items] == ["App.sln", "Lib.slnx", "Other.sln"]
        assert items[0].description == "Root folder"
        assert items[0].detail == "App.sln"
        assert items[1].description == "src/lib"
        assert items[1].detail == "src/lib/Lib.slnx"
        assert items[2].detail == "/other/Other.sln"
        assert items[1].path == "/ws/src/lib/Lib.slnx"

    def test_no_workspace_root(self):
        items = build_pick_items([SolutionDescriptor("/ws/App.sln")], "")
        assert items[0].detail == "/ws/App.sln"
        assert items[0].description == "/ws"


class TestParseReferenceArguments:
    def test_json_text(self):
        arg = json.dumps(
            {"textDocument": {"uri": "file:///ws/A.cs"}, "position": {"line": 4, "character": 7}}
        )
        uri, position = parse_reference_arguments(arg)
        assert uri == "file:///ws/A.cs"
        assert (position.line, position.character) == (4, 7)

    def test_mapping(self):
        parsed = parse_reference_arguments(
            {"textDocument": {"uri": "file:///ws/A.cs"}, "position": {"line": 0, "character": 1}}
        )
        assert parsed[0] == "file:///ws/A.cs"

    def test_incomplete_structure(self):
        assert parse_reference_arguments({"textDocument": {}}) is None
        assert parse_reference_arguments({"position": {"line": 1}}) is None
        assert parse_reference_arguments("[1, 2]") is None

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            parse_reference_arguments("{not json")


class TestShowReferencesCommand:
    ARG = json.dumps(
        {"textDocument": {"uri": "file:///ws/A.cs"}, "position": {"line": 2, "character": 3}}
    )

    @pytest.mark.asyncio
    async def test_references_shown(self):
        locations = [_location("file:///ws/A.cs", 2), _location("file:///ws/B.cs", 10)]
        provider = AsyncMock(return_value=locations)
        host = ToolHost(["/ws"], reference_provider=provider)

        shown = await show_references_command(host, self.ARG)

        assert shown == locations
        provider.assert_awaited_once_with("file:///ws/A.cs", lsp.Position(line=2, character=3))
        assert host.shown_references == [
            {"uri": "file:///ws/A.cs", "line": 2, "character": 0},
            {"uri": "file:///ws/B.cs", "line": 10, "character": 0},
        ]
        assert host.messages == []

    @pytest.mark.asyncio
    async def test_no_references(self):
        host = ToolHost(["/ws"], reference_provider=AsyncMock(return_value=[]))

        assert await show_references_command(host, self.ARG) == []
        assert [m.text for m in host.messages] == ["No references found"]

    @pytest.mark.asyncio
    async def test_provider_error(self):
        host = ToolHost(["/ws"], reference_provider=AsyncMock(side_effect=RuntimeError("boom")))

        assert await show_references_command(host, self.ARG) == []
        assert host.messages[0].level == "error"
        assert host.messages[0].text == "Error showing references: boom"

    @pytest.mark.asyncio
    async def test_invalid_json_reported(self):
        host = ToolHost(["/ws"])

        assert await show_references_command(host, "{not json") == []
        assert host.messages[0].text.startswith("Error showing references: ")

    @pytest.mark.asyncio
    async def test_no_arguments(self):
        host = ToolHost(["/ws"])
        assert await show_references_command(host) == []
        assert host.messages == []

    @pytest.mark.asyncio
    async def test_without_provider(self):
        host = ToolHost(["/ws"])
        assert await show_references_command(host, self.ARG) == []
        assert [m.text for m in host.messages] == ["No references found"]


class TestToolHost:
    @pytest.mark.asyncio
    async def test_unaccepted_action_returns_none(self):
        host = ToolHost(["/ws"])
        assert await host.show_information_message("Question?", "Yes") is None
        assert host.messages[0].actions == ["Yes"]

    @pytest.mark.asyncio
    async def test_accepted_action(self):
        host = ToolHost(["/ws"])
        host.accept_actions = ["Yes"]
        assert await host.show_warning_message("Question?", "No", "Yes") == "Yes"

    @pytest.mark.asyncio
    async def test_quick_pick_matches_path_or_label(self):
        host = ToolHost(["/ws"])
        items = build_pick_items(
            [SolutionDescriptor("/ws/App.sln"), SolutionDescriptor("/ws/lib/Lib.slnx")], "/ws"
        )

        host.select_path = "/WS/LIB/lib.slnx"
        assert (await host.show_quick_pick(items, "pick")).label == "Lib.slnx"

        host.select_path = "App.sln"
        assert (await host.show_quick_pick(items, "pick")).path == "/ws/App.sln"

        host.select_path = "/ws/Missing.sln"
        assert await host.show_quick_pick(items, "pick") is None

    def test_drain_messages(self):
        host = ToolHost(["/ws"])
        host._answer("info", "hello", [])
        assert [m.text for m in host.drain_messages()] == ["hello"]
        assert host.messages == []
