"""Base repository interface."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TypeVar

from mappedrepo.core.domain.example import Example
from mappedrepo.core.domain.paging import Page, Pageable, Sort

T = TypeVar("T")
ID = TypeVar("ID")


class Repository[T, ID](ABC):
    """Generic CRUD, paging and query-by-example repository contract.

    ``T`` is the type the repository hands out and accepts, ``ID`` the type of
    its identifiers. Implementations raise ``RepositoryError`` subclasses on
    failure.
    """

    # ---------- Lookup ----------
    @abstractmethod
    def find_by_id(self, entity_id: ID) -> T | None:
        """Return the object with the given id, or None."""

    @abstractmethod
    def exists_by_id(self, entity_id: ID) -> bool:
        """Return whether an object with the given id exists."""

    @abstractmethod
    def find_all(self, sort: Sort | None = None) -> list[T]:
        """Return all objects, optionally sorted."""

    @abstractmethod
    def find_page(self, pageable: Pageable) -> Page[T]:
        """Return one page of all objects."""

    @abstractmethod
    def find_all_by_id(self, ids: Iterable[ID]) -> list[T]:
        """Return the objects whose ids are given; unknown ids are skipped."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored objects."""

    @abstractmethod
    def get_by_id(self, entity_id: ID) -> T:
        """Return the object with the given id or raise if there is none."""

    def get_one(self, entity_id: ID) -> T:
        """Deprecated alias of ``get_by_id``."""
        return self.get_by_id(entity_id)

    # ---------- Delete ----------
    @abstractmethod
    def delete_by_id(self, entity_id: ID) -> None:
        """Delete the object with the given id."""

    @abstractmethod
    def delete(self, entity: T) -> None:
        """Delete the given object."""

    @abstractmethod
    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        """Delete every object whose id is given."""

    @abstractmethod
    def delete_all(self, entities: Iterable[T] | None = None) -> None:
        """Delete the given objects, or every object when none are given."""

    @abstractmethod
    def delete_in_batch(self, entities: Iterable[T]) -> None:
        """Delete the given objects in a single batch."""

    @abstractmethod
    def delete_all_in_batch(self, entities: Iterable[T] | None = None) -> None:
        """Batch-delete the given objects, or every object when none are given."""

    @abstractmethod
    def delete_all_by_id_in_batch(self, ids: Iterable[ID]) -> None:
        """Delete every object whose id is given in a single batch."""

    # ---------- Save ----------
    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist the object and return its persisted state."""

    @abstractmethod
    def save_all(self, entities: Iterable[T]) -> list[T]:
        """Persist the objects and return their persisted states, in order."""

    @abstractmethod
    def flush(self) -> None:
        """Push pending changes to the underlying store."""

    @abstractmethod
    def save_and_flush(self, entity: T) -> T:
        """Persist the object, flush, and return its persisted state."""

    @abstractmethod
    def save_all_and_flush(self, entities: Iterable[T]) -> list[T]:
        """Persist the objects, flush, and return their persisted states."""

    # ---------- Query by example ----------
    @abstractmethod
    def find_one(self, example: Example[T]) -> T | None:
        """Return the single object matching the example, or None."""

    @abstractmethod
    def find_all_by_example(self, example: Example[T], sort: Sort | None = None) -> list[T]:
        """Return every object matching the example, optionally sorted."""

    @abstractmethod
    def find_page_by_example(self, example: Example[T], pageable: Pageable) -> Page[T]:
        """Return one page of the objects matching the example."""

    @abstractmethod
    def count_by_example(self, example: Example[T]) -> int:
        """Return the number of objects matching the example."""

    @abstractmethod
    def exists_by_example(self, example: Example[T]) -> bool:
        """Return whether any object matches the example."""
