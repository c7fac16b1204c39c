"""Marten: solution-aware host for the csharp-ls language server."""

__version__ = "0.1.0"
