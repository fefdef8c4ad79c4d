"""Shared fixtures for hub-side tests."""

import asyncio

import pytest
import yaml

from hivespoke.documents import MANIFEST_PATH, STATUS_PATH
from hivespoke.hub.sources import DocumentNotFound


class DictSource:
    """In-memory DocumentSource keyed by (spoke name, path).

    A value may be text, an exception instance to raise, or a float meaning
    "hang for this many seconds".
    """

    def __init__(self, documents=None):
        self.documents = dict(documents or {})
        self.fetched = []
        self.in_flight = 0
        self.max_in_flight = 0

    def put(self, spoke, path, value):
        if isinstance(value, dict):
            value = yaml.safe_dump(value, sort_keys=False)
        self.documents[(spoke, path)] = value

    async def fetch(self, spoke, path):
        self.fetched.append((spoke.name, path))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            value = self.documents.get((spoke.name, path))
            if value is None:
                raise DocumentNotFound(spoke.name, path)
            if isinstance(value, BaseException):
                raise value
            if isinstance(value, float):
                await asyncio.sleep(value)
                raise AssertionError("fetch should have been cancelled")
            return value
        finally:
            self.in_flight -= 1

    async def aclose(self):
        self.closed = True


@pytest.fixture
def source():
    return DictSource()


@pytest.fixture
def add_spoke(source):
    """Register a spoke's manifest (and optional status) on the source."""

    def add(name, manifest, status=None):
        source.put(name, MANIFEST_PATH, manifest)
        if status is not None:
            source.put(name, STATUS_PATH, status)

    return add
