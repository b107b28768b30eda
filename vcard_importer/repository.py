"""
Vocabulary repository boundary.

The decoder only ever asks a repository to find or create vocabulary
entities; it never commits or flushes. Durable storage implements the
``Repository`` protocol, ``InMemoryRepository`` is the default for
standalone use and tests.
"""

import logging
from typing import Dict, List, Optional, Protocol, Tuple, TypeVar
from typing import Type as TypingType

from vcard_importer.models import VocabularyEntity

logger = logging.getLogger("vcard_importer")

V = TypeVar("V", bound=VocabularyEntity)


class Repository(Protocol):
    def find_by_value(self, kind: TypingType[V], value: str) -> Optional[V]:
        ...

    def create(self, kind: TypingType[V], value: str) -> V:
        ...


class InMemoryRepository:
    """
    Dict-backed vocabulary store.

    Entities created here are kept in ``created`` in creation order so a
    caller can hand them to its own persistence layer.
    """

    def __init__(self) -> None:
        self._entities: Dict[Tuple[type, str], VocabularyEntity] = {}
        self.created: List[VocabularyEntity] = []

    def find_by_value(self, kind: TypingType[V], value: str) -> Optional[V]:
        return self._entities.get((kind, value))

    def create(self, kind: TypingType[V], value: str) -> V:
        entity = kind(value)
        self._entities[(kind, value)] = entity
        self.created.append(entity)
        logger.debug(f"Created {kind.__name__} vocabulary entry: {value!r}")
        return entity

    def __len__(self) -> int:
        return len(self._entities)
