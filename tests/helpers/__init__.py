"""Test helpers."""

from .fake_client import FakeClientFactory, FakeLanguageClient, make_policy

__all__ = ["FakeClientFactory", "FakeLanguageClient", "make_policy"]
