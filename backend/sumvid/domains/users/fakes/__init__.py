"""Fakes for the users domain."""

from sumvid.domains.users.fakes.repository import FakeUserRepository

__all__ = ["FakeUserRepository"]
