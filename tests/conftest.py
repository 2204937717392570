"""Shared fixtures for the coaching engine tests."""

import itertools

import pytest

from growcoach.application.services import SessionCache, SessionLockRegistry
from growcoach.infrastructure.cache import LRUSessionCache
from growcoach.infrastructure.repositories import InMemoryDocumentStore

from helpers import ScriptedAIService


@pytest.fixture
def clock():
    """Deterministic millisecond clock starting at 1_000_000."""
    counter = itertools.count(1_000_000, 1000)
    return lambda: next(counter)


@pytest.fixture
def store():
    """Empty in-memory document store"""
    return InMemoryDocumentStore()


@pytest.fixture
def backend():
    """Session cache backend"""
    return LRUSessionCache(max_entries=100)


@pytest.fixture
def session_cache(store, backend, clock):
    """SessionCache over the in-memory store"""
    return SessionCache(store, backend, locks=SessionLockRegistry(), clock=clock)


@pytest.fixture
def ai_service():
    """Scripted AI service"""
    return ScriptedAIService()
