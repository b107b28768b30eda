from vcard_importer.models import TagValue, Type
from vcard_importer.repository import InMemoryRepository
from vcard_importer.value_cache import ValueCache


class CountingRepository(InMemoryRepository):
    def __init__(self) -> None:
        super().__init__()
        self.lookups = 0

    def find_by_value(self, kind, value):
        self.lookups += 1
        return super().find_by_value(kind, value)


def test_resolve_returns_one_instance_per_value() -> None:
    repository = CountingRepository()
    cache = ValueCache(repository)

    first = cache.resolve(Type, "work")
    second = cache.resolve(Type, "work")

    assert first is second
    assert repository.lookups == 1
    assert (cache.hits, cache.misses) == (1, 1)
    assert repository.created == [first]


def test_resolve_prefers_existing_repository_entry() -> None:
    repository = CountingRepository()
    existing = repository.create(Type, "home")
    cache = ValueCache(repository)

    assert cache.resolve(Type, "home") is existing
    assert repository.created == [existing]


def test_kinds_are_kept_apart() -> None:
    cache = ValueCache()

    work_type = cache.resolve(Type, "work")
    work_tag = cache.resolve(TagValue, "work")

    assert work_type is not work_tag
    assert isinstance(work_tag, TagValue)
    assert (Type, "work") in cache
    assert (TagValue, "home") not in cache
    assert len(cache) == 2


def test_values_are_case_sensitive() -> None:
    cache = ValueCache()

    assert cache.resolve(Type, "Work") is not cache.resolve(Type, "work")


def test_default_repository_is_in_memory() -> None:
    cache = ValueCache()

    cache.resolve(Type, "cell")

    assert isinstance(cache.repository, InMemoryRepository)
    assert len(cache.repository) == 1


def test_fresh_cache_reuses_shared_repository() -> None:
    repository = InMemoryRepository()

    first = ValueCache(repository).resolve(Type, "fax")
    second = ValueCache(repository).resolve(Type, "fax")

    assert first is second
    assert len(repository) == 1
