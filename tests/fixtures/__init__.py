"""Test fixtures module."""

from tests.fixtures.fakes import FakeHttpClient, FakeProbe, FakeProcessRunner

__all__ = ["FakeHttpClient", "FakeProbe", "FakeProcessRunner"]
