"""In-memory repository implementation."""

import copy
import itertools
import threading
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from loguru import logger

from mappedrepo.core.domain.example import Example
from mappedrepo.core.domain.exceptions import (
    EntityNotFoundError,
    IncorrectResultSizeError,
    RepositoryError,
)
from mappedrepo.core.domain.paging import Page, Pageable, Sort
from mappedrepo.core.domain.repository import Repository
from mappedrepo.core.infrastructure.logging import RepositoryEvents

E = TypeVar("E")
ID = TypeVar("ID")


def _property(item: Any, name: str) -> Any:
    try:
        return getattr(item, name)
    except AttributeError as exc:
        raise RepositoryError(f"No property '{name}' on {type(item).__name__}") from exc


def _sort_key(value: Any, ignore_case: bool) -> tuple[bool, Any]:
    # None sorts first in ascending order
    if ignore_case and isinstance(value, str):
        value = value.casefold()
    return (value is not None, value)


def sort_entities[T](entities: list[T], sort: Sort | None) -> list[T]:
    """Return ``entities`` ordered by ``sort``; the input order breaks ties."""
    result = list(entities)
    if not sort:
        return result
    # Stable sorts applied from the least significant order up
    for order in reversed(sort.orders):
        result.sort(
            key=lambda item, o=order: _sort_key(_property(item, o.property), o.ignore_case),
            reverse=not order.direction.is_ascending,
        )
    return result


class InMemoryRepository[E, ID](Repository[E, ID]):
    """Dictionary-backed repository keeping entities in insertion order.

    Stored entities are deep copies: callers never share state with the store.
    Entities without an id get one from ``id_factory`` on save.
    """

    def __init__(
        self,
        id_attribute: str = "id",
        id_factory: Callable[[], ID] | None = None,
    ):
        self._id_attribute = id_attribute
        self._id_factory: Callable[[], Any] = id_factory or itertools.count(1).__next__
        self._store: dict[ID, E] = {}
        self._lock = threading.RLock()

    # ---------- Lookup ----------
    def find_by_id(self, entity_id: ID) -> E | None:
        with self._lock:
            entity = self._store.get(entity_id)
            return copy.deepcopy(entity) if entity is not None else None

    def exists_by_id(self, entity_id: ID) -> bool:
        with self._lock:
            return entity_id in self._store

    def find_all(self, sort: Sort | None = None) -> list[E]:
        with self._lock:
            return sort_entities(self._snapshot(), sort)

    def find_page(self, pageable: Pageable) -> Page[E]:
        return self._page(self.find_all(pageable.sort), pageable)

    def find_all_by_id(self, ids: Iterable[ID]) -> list[E]:
        with self._lock:
            return [copy.deepcopy(self._store[i]) for i in ids if i in self._store]

    def count(self) -> int:
        with self._lock:
            return len(self._store)

    def get_by_id(self, entity_id: ID) -> E:
        entity = self.find_by_id(entity_id)
        if entity is None:
            RepositoryEvents.entity_not_found(type(self).__name__, "Entity", entity_id)
            raise EntityNotFoundError("Entity", entity_id)
        return entity

    # ---------- Delete ----------
    def delete_by_id(self, entity_id: ID) -> None:
        with self._lock:
            self._store.pop(entity_id, None)

    def delete(self, entity: E) -> None:
        entity_id = self._id_of(entity)
        if entity_id is not None:
            self.delete_by_id(entity_id)

    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        with self._lock:
            for entity_id in ids:
                self._store.pop(entity_id, None)

    def delete_all(self, entities: Iterable[E] | None = None) -> None:
        with self._lock:
            if entities is None:
                self._store.clear()
                return
            for entity in entities:
                self.delete(entity)

    def delete_in_batch(self, entities: Iterable[E]) -> None:
        self.delete_all(list(entities))

    def delete_all_in_batch(self, entities: Iterable[E] | None = None) -> None:
        self.delete_all(None if entities is None else list(entities))

    def delete_all_by_id_in_batch(self, ids: Iterable[ID]) -> None:
        self.delete_all_by_id(ids)

    # ---------- Save ----------
    def save(self, entity: E) -> E:
        stored = copy.deepcopy(entity)
        with self._lock:
            entity_id = self._id_of(stored)
            if entity_id is None:
                entity_id = self._next_id()
                setattr(stored, self._id_attribute, entity_id)
            self._store[entity_id] = stored
            logger.debug(f"{type(self).__name__} saved entity {entity_id!r}")
            return copy.deepcopy(stored)

    def save_all(self, entities: Iterable[E]) -> list[E]:
        with self._lock:
            return [self.save(entity) for entity in entities]

    def flush(self) -> None:
        pass

    def save_and_flush(self, entity: E) -> E:
        saved = self.save(entity)
        self.flush()
        return saved

    def save_all_and_flush(self, entities: Iterable[E]) -> list[E]:
        saved = self.save_all(entities)
        self.flush()
        return saved

    # ---------- Query by example ----------
    def find_one(self, example: Example[E]) -> E | None:
        matches = self.find_all_by_example(example)
        if len(matches) > 1:
            raise IncorrectResultSizeError(1, len(matches))
        return matches[0] if matches else None

    def find_all_by_example(self, example: Example[E], sort: Sort | None = None) -> list[E]:
        with self._lock:
            matches = [entity for entity in self._snapshot() if example.matches(entity)]
        return sort_entities(matches, sort)

    def find_page_by_example(self, example: Example[E], pageable: Pageable) -> Page[E]:
        return self._page(self.find_all_by_example(example, pageable.sort), pageable)

    def count_by_example(self, example: Example[E]) -> int:
        return len(self.find_all_by_example(example))

    def exists_by_example(self, example: Example[E]) -> bool:
        return self.count_by_example(example) > 0

    # ---------- Helpers ----------
    def _id_of(self, entity: E) -> Any:
        try:
            return getattr(entity, self._id_attribute)
        except AttributeError as exc:
            raise RepositoryError(
                f"{type(entity).__name__} has no id attribute '{self._id_attribute}'"
            ) from exc

    def _next_id(self) -> Any:
        # Skip ids already taken by entities saved with an explicit id
        entity_id = self._id_factory()
        while entity_id in self._store:
            entity_id = self._id_factory()
        return entity_id

    def _snapshot(self) -> list[E]:
        return [copy.deepcopy(entity) for entity in self._store.values()]

    @staticmethod
    def _page(items: list[E], pageable: Pageable) -> Page[E]:
        start = pageable.offset
        return Page(items[start : start + pageable.page_size], pageable, len(items))
