"""Language server supervision."""

from .client import CSharpLanguageClient, LanguageClient
from .supervisor import METADATA_REQUEST, ServerSession, ServerSupervisor, SupervisorState

__all__ = [
    "CSharpLanguageClient",
    "LanguageClient",
    "ServerSession",
    "ServerSupervisor",
    "SupervisorState",
    "METADATA_REQUEST",
]
