"""Repository adapter translating between domain objects and persisted entities."""

from collections.abc import Callable, Iterable
from typing import TypeVar

from loguru import logger

from mappedrepo.core.domain.example import Example
from mappedrepo.core.domain.exceptions import RepositoryError
from mappedrepo.core.domain.paging import Page, Pageable, Sort
from mappedrepo.core.domain.repository import Repository
from mappedrepo.core.infrastructure.database.mapper import BaseMapper
from mappedrepo.core.infrastructure.logging import RepositoryEvents

D = TypeVar("D")  # Domain object type
E = TypeVar("E")  # Entity type
ID = TypeVar("ID")  # Entity id type
R = TypeVar("R")


class MappedRepository[D, E, ID](Repository[D, ID]):
    """A repository exposing domain objects on top of an entity repository.

    Every call converts domain-object arguments with ``mapper.to_entity``,
    delegates to the wrapped repository, and converts returned entities (single
    values, lists and pages) with ``mapper.to_domain``. Ids, sorts and
    pageables pass through untouched.

    Failures that are already ``RuntimeError`` propagate unchanged; any other
    exception raised by the repository or the mapper is re-raised as
    ``RepositoryError`` with the original as its cause.
    """

    def __init__(self, repository: Repository[E, ID], mapper: BaseMapper[D, E]):
        self._repository = repository
        self._mapper = mapper

    @property
    def repository(self) -> Repository[E, ID]:
        return self._repository

    @property
    def mapper(self) -> BaseMapper[D, E]:
        return self._mapper

    # ---------- Lookup ----------
    def find_by_id(self, entity_id: ID) -> D | None:
        return self._call_optional("find_by_id", lambda: self._repository.find_by_id(entity_id))

    def exists_by_id(self, entity_id: ID) -> bool:
        return self._attempt("exists_by_id", lambda: self._repository.exists_by_id(entity_id))

    def find_all(self, sort: Sort | None = None) -> list[D]:
        if sort is None:
            return self._call_list("find_all", self._repository.find_all)
        return self._call_list("find_all", lambda: self._repository.find_all(sort))

    def find_page(self, pageable: Pageable) -> Page[D]:
        return self._call_page("find_page", lambda: self._repository.find_page(pageable))

    def find_all_by_id(self, ids: Iterable[ID]) -> list[D]:
        return self._call_list("find_all_by_id", lambda: self._repository.find_all_by_id(ids))

    def count(self) -> int:
        return self._attempt("count", self._repository.count)

    def get_by_id(self, entity_id: ID) -> D:
        return self._call("get_by_id", lambda: self._repository.get_by_id(entity_id))

    def get_one(self, entity_id: ID) -> D:
        """Deprecated alias of ``get_by_id``."""
        return self._call("get_one", lambda: self._repository.get_one(entity_id))

    # ---------- Delete ----------
    def delete_by_id(self, entity_id: ID) -> None:
        self._attempt("delete_by_id", lambda: self._repository.delete_by_id(entity_id))

    def delete(self, entity: D) -> None:
        self._attempt("delete", lambda: self._repository.delete(self.to_entity(entity)))

    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        self._attempt("delete_all_by_id", lambda: self._repository.delete_all_by_id(ids))

    def delete_all(self, entities: Iterable[D] | None = None) -> None:
        if entities is None:
            self._attempt("delete_all", self._repository.delete_all)
            return
        self._attempt(
            "delete_all", lambda: self._repository.delete_all(self.to_entity_list(entities))
        )

    def delete_in_batch(self, entities: Iterable[D]) -> None:
        self._attempt(
            "delete_in_batch",
            lambda: self._repository.delete_in_batch(self.to_entity_list(entities)),
        )

    def delete_all_in_batch(self, entities: Iterable[D] | None = None) -> None:
        if entities is None:
            self._attempt("delete_all_in_batch", self._repository.delete_all_in_batch)
            return
        self._attempt(
            "delete_all_in_batch",
            lambda: self._repository.delete_all_in_batch(self.to_entity_list(entities)),
        )

    def delete_all_by_id_in_batch(self, ids: Iterable[ID]) -> None:
        self._attempt(
            "delete_all_by_id_in_batch",
            lambda: self._repository.delete_all_by_id_in_batch(ids),
        )

    # ---------- Save ----------
    def save(self, entity: D) -> D:
        return self._call("save", lambda: self._repository.save(self.to_entity(entity)))

    def save_all(self, entities: Iterable[D]) -> list[D]:
        return self._call_list(
            "save_all", lambda: self._repository.save_all(self.to_entity_list(entities))
        )

    def flush(self) -> None:
        self._attempt("flush", self._repository.flush)

    def save_and_flush(self, entity: D) -> D:
        return self._call(
            "save_and_flush", lambda: self._repository.save_and_flush(self.to_entity(entity))
        )

    def save_all_and_flush(self, entities: Iterable[D]) -> list[D]:
        return self._call_list(
            "save_all_and_flush",
            lambda: self._repository.save_all_and_flush(self.to_entity_list(entities)),
        )

    # ---------- Query by example ----------
    def find_one(self, example: Example[D]) -> D | None:
        return self._call_optional(
            "find_one", lambda: self._repository.find_one(self.to_entity_example(example))
        )

    def find_all_by_example(self, example: Example[D], sort: Sort | None = None) -> list[D]:
        if sort is None:
            return self._call_list(
                "find_all_by_example",
                lambda: self._repository.find_all_by_example(self.to_entity_example(example)),
            )
        return self._call_list(
            "find_all_by_example",
            lambda: self._repository.find_all_by_example(self.to_entity_example(example), sort),
        )

    def find_page_by_example(self, example: Example[D], pageable: Pageable) -> Page[D]:
        return self._call_page(
            "find_page_by_example",
            lambda: self._repository.find_page_by_example(
                self.to_entity_example(example), pageable
            ),
        )

    def count_by_example(self, example: Example[D]) -> int:
        return self._attempt(
            "count_by_example",
            lambda: self._repository.count_by_example(self.to_entity_example(example)),
        )

    def exists_by_example(self, example: Example[D]) -> bool:
        return self._attempt(
            "exists_by_example",
            lambda: self._repository.exists_by_example(self.to_entity_example(example)),
        )

    # ---------- Conversion helpers ----------
    def to_domain_optional(self, entity: E | None) -> D | None:
        return self._mapper.to_domain(entity) if entity is not None else None

    def to_domain_list(self, entities: Iterable[E]) -> list[D]:
        return self._mapper.to_domain_list(entities)

    def to_entity(self, domain: D) -> E:
        return self._mapper.to_entity(domain)

    def to_entity_list(self, domains: Iterable[D]) -> list[E]:
        return self._mapper.to_entity_list(domains)

    def to_entity_example(self, example: Example[D]) -> Example[E]:
        """Re-type the probe of an example, keeping its matcher."""
        return example.with_probe(self.to_entity(example.probe))

    # ---------- Call wrappers ----------
    def _call(self, operation: str, call: Callable[[], E]) -> D:
        return self._attempt(operation, lambda: self._mapper.to_domain(call()))

    def _call_optional(self, operation: str, call: Callable[[], E | None]) -> D | None:
        return self._attempt(operation, lambda: self.to_domain_optional(call()))

    def _call_list(self, operation: str, call: Callable[[], Iterable[E]]) -> list[D]:
        return self._attempt(operation, lambda: self.to_domain_list(call()))

    def _call_page(self, operation: str, call: Callable[[], Page[E]]) -> Page[D]:
        return self._attempt(operation, lambda: call().map(self._mapper.to_domain))

    def _attempt(self, operation: str, call: Callable[[], R]) -> R:
        """Run a delegated call, normalising failures to ``RuntimeError``."""
        try:
            return call()
        except RuntimeError as exc:
            logger.debug(f"{type(self).__name__}.{operation} failed: {exc!r}")
            RepositoryEvents.call_failed(type(self).__name__, operation, exc, wrapped=False)
            raise
        except Exception as exc:
            logger.debug(f"{type(self).__name__}.{operation} failed, wrapping: {exc!r}")
            RepositoryEvents.call_failed(type(self).__name__, operation, exc, wrapped=True)
            raise RepositoryError(f"{operation} failed: {exc}") from exc
