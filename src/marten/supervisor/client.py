"""Language client bound to one csharp-ls process."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any, Callable, List, Optional, Protocol

from lsprotocol import types as lsp
from pygls.lsp.client import BaseLanguageClient

from .. import __version__

logger = logging.getLogger(__name__)

ExitCallback = Callable[[Optional[int]], None]


class LanguageClient(Protocol):
    """What the supervisor needs from a client implementation."""

    on_exit: Optional[ExitCallback]

    async def start(self, command: str, args: List[str], cwd: str, root_uri: str) -> None: ...

    async def stop(self) -> None: ...

    def terminate(self) -> None: ...

    async def send_request(self, method: str, params: Any) -> Any: ...


class _PyglsClient(BaseLanguageClient):
    """BaseLanguageClient that reports the server process exiting."""

    def __init__(self, name: str, version: str, owner: CSharpLanguageClient) -> None:
        super().__init__(name, version)
        self._owner = owner

    async def server_exit(self, server: asyncio.subprocess.Process) -> None:
        logger.debug(f"Language server process {server.pid} exited with {server.returncode}")
        if self._owner.on_exit is not None:
            self._owner.on_exit(server.returncode)


class CSharpLanguageClient:
    """pygls client speaking LSP over the server's stdio.

    ``start`` returns once the initialize handshake has completed, which is
    the readiness signal the supervisor waits for. ``on_exit`` is called
    with the return code whenever the server process goes away, including
    after a regular ``stop``.
    """

    def __init__(
        self,
        name: str = "marten",
        initialize_timeout: float = 120.0,
        shutdown_timeout: float = 5.0,
    ) -> None:
        self._client = _PyglsClient(name, __version__, self)
        self.initialize_timeout = initialize_timeout
        self.shutdown_timeout = shutdown_timeout
        self.server_info: Optional[lsp.InitializeResultServerInfoType] = None
        self.on_exit: Optional[ExitCallback] = None
        self._started = False

    @property
    def process(self) -> Optional[asyncio.subprocess.Process]:
        """The server process, once spawned."""
        # Set by pygls in start_io
        return getattr(self._client, "_server", None)

    async def start(self, command: str, args: List[str], cwd: str, root_uri: str) -> None:
        """Spawn the server and perform the initialize handshake.

        Raises:
            OSError: If the process cannot be spawned
            asyncio.TimeoutError: If the server does not answer initialize
        """
        await self._client.start_io(command, *args, cwd=cwd)
        self._started = True

        params = lsp.InitializeParams(
            process_id=os.getpid(),
            root_uri=root_uri,
            capabilities=lsp.ClientCapabilities(
                workspace=lsp.WorkspaceClientCapabilities(workspace_folders=True),
            ),
            client_info=lsp.InitializeParamsClientInfoType(name="marten", version=__version__),
            workspace_folders=[
                lsp.WorkspaceFolder(uri=root_uri, name=os.path.basename(cwd) or cwd)
            ],
        )
        result = await asyncio.wait_for(
            self._client.initialize_async(params), timeout=self.initialize_timeout
        )
        self.server_info = result.server_info
        self._client.initialized(lsp.InitializedParams())

        if self.server_info:
            logger.info(f"Connected to {self.server_info.name} {self.server_info.version or ''}")

    async def stop(self) -> None:
        """Ask the server to shut down, then make sure the process is gone."""
        if not self._started:
            return
        self._started = False
        try:
            await asyncio.wait_for(
                self._client.shutdown_async(None), timeout=self.shutdown_timeout
            )
            self._client.exit(None)
        except Exception as e:
            logger.warning(f"Graceful language server shutdown failed: {type(e).__name__}: {e}")
        finally:
            await self._client.stop()

    def terminate(self) -> None:
        """Kill the server process without the LSP shutdown exchange.

        For callers that cannot await, such as signal handlers running while
        the event loop is busy.
        """
        self._started = False
        process = self.process
        if process is not None and process.returncode is None:
            logger.info(f"Terminating language server process {process.pid}")
            process.terminate()

    async def send_request(self, method: str, params: Any) -> Any:
        return await self._client.protocol.send_request_async(method, params)
