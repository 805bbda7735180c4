"""Offline sandbox feed backed by Faker-generated data."""

from txn_mirror.sandbox.feed import SANDBOX_ACCESS_TOKEN, SandboxFeed
from txn_mirror.sandbox.generator import PayloadGenerator

__all__ = ["PayloadGenerator", "SANDBOX_ACCESS_TOKEN", "SandboxFeed"]
