"""
Todo Service - UUID Generator
==============================

What:  One-method interface producing unique identifier strings, used for
       both todo ids and bearer tokens.
How:   TodoService and AuthService receive a generator at construction;
       create_app() wires SimpleUUIDGenerator unless told otherwise.

Implementations:
    - SimpleUUIDGenerator: random uuid4 strings (production default)
    - SequentialUUIDGenerator: predictable UUID-shaped strings, so tests
      can assert on exact ids and tokens
"""

import itertools
import threading
import uuid
from abc import ABC, abstractmethod


class UUIDGenerator(ABC):
    """Capability set {generate}: a fresh unique string on each call."""

    @abstractmethod
    def generate(self) -> str:
        """Return an identifier never returned before by this generator."""
        ...


class SimpleUUIDGenerator(UUIDGenerator):
    """Random version-4 UUIDs in canonical 36-character form."""

    def generate(self) -> str:
        return str(uuid.uuid4())


class SequentialUUIDGenerator(UUIDGenerator):
    """
    Deterministic generator for tests.

    Produces 00000000-0000-0000-0000-000000000001, ...0002, and so on,
    starting after `start`. Safe to share between threads.
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start + 1)
        self._lock = threading.Lock()

    def generate(self) -> str:
        with self._lock:
            value = next(self._counter)
        return str(uuid.UUID(int=value))
