"""
Session-scoped deduplication of vocabulary entities.
"""

import logging
from typing import Dict, Optional, Tuple
from typing import Type as TypingType

from vcard_importer.models import VocabularyEntity
from vcard_importer.repository import InMemoryRepository, Repository, V

logger = logging.getLogger("vcard_importer")


class ValueCache:
    """
    Maps (vocabulary kind, value) to one shared vocabulary entity.

    A miss is resolved through the repository first and only then by
    creating a new entity, so each distinct value yields exactly one
    instance for the lifetime of the cache.
    """

    def __init__(self, repository: Optional[Repository] = None):
        """
        Initialize the cache.

        Args:
            repository: Vocabulary repository; an in-memory one is used if omitted
        """
        self.repository = repository if repository is not None else InMemoryRepository()
        self._entries: Dict[Tuple[type, str], VocabularyEntity] = {}
        self.hits = 0
        self.misses = 0

    def resolve(self, kind: TypingType[V], value: str) -> V:
        """
        Get or create the vocabulary entity for a value.

        Args:
            kind: Vocabulary entity class (Type, TagValue, ...)
            value: Vocabulary value string

        Returns:
            The session-unique entity for ``value``
        """
        key = (kind, value)
        entity = self._entries.get(key)
        if entity is not None:
            self.hits += 1
            return entity

        self.misses += 1
        entity = self.repository.find_by_value(kind, value)
        if entity is None:
            entity = self.repository.create(kind, value)
        self._entries[key] = entity
        return entity

    def __contains__(self, key: Tuple[type, str]) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
