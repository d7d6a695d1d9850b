"""SQLModel repository implementation."""

from collections.abc import Generator, Iterable
from contextlib import contextmanager
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy import ColumnElement, and_, delete, func, inspect, or_, true
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from mappedrepo.core.domain.example import Example, NullHandler, StringMatcher, probe_values
from mappedrepo.core.domain.exceptions import (
    DataIntegrityError,
    EntityNotFoundError,
    IncorrectResultSizeError,
    RepositoryError,
)
from mappedrepo.core.domain.paging import Direction, Page, Pageable, Sort
from mappedrepo.core.domain.repository import Repository
from mappedrepo.core.infrastructure.logging import RepositoryEvents

E = TypeVar("E", bound=SQLModel)
ID = TypeVar("ID")


class SQLModelRepository[E: SQLModel, ID](Repository[E, ID]):
    """Repository over one SQLModel table model.

    The repository works inside the caller's session and never commits or
    rolls back: transaction boundaries belong to the caller. The table must
    have a single-column primary key.
    """

    def __init__(self, session: Session, model_class: type[E]):
        self.session = session
        self.model_class = model_class

        mapper = inspect(model_class)
        primary_key = mapper.primary_key
        if len(primary_key) != 1:
            raise RepositoryError(
                f"{model_class.__name__} must have exactly one primary key column"
            )
        self._id_column = primary_key[0]
        self._id_attribute = mapper.get_property_by_column(self._id_column).key
        self._columns = {prop.key for prop in mapper.column_attrs}

    # ---------- Lookup ----------
    def find_by_id(self, entity_id: ID) -> E | None:
        with self._translate_errors("find by id"):
            return self.session.get(self.model_class, entity_id)

    def exists_by_id(self, entity_id: ID) -> bool:
        statement = select(func.count()).select_from(self.model_class).where(
            self._id_column == entity_id
        )
        with self._translate_errors("check existence"):
            return self.session.exec(statement).one() > 0

    def find_all(self, sort: Sort | None = None) -> list[E]:
        statement = self._apply_sort(select(self.model_class), sort)
        with self._translate_errors("find all"):
            return list(self.session.exec(statement).all())

    def find_page(self, pageable: Pageable) -> Page[E]:
        return self._find_page(true(), pageable)

    def find_all_by_id(self, ids: Iterable[ID]) -> list[E]:
        id_list = list(ids)
        if not id_list:
            return []
        statement = select(self.model_class).where(self._id_column.in_(id_list))
        with self._translate_errors("find all by id"):
            return list(self.session.exec(statement).all())

    def count(self) -> int:
        return self._count(true())

    def get_by_id(self, entity_id: ID) -> E:
        entity = self.find_by_id(entity_id)
        if entity is None:
            RepositoryEvents.entity_not_found(
                type(self).__name__, self.model_class.__name__, entity_id
            )
            raise EntityNotFoundError(self.model_class.__name__, entity_id)
        return entity

    # ---------- Delete ----------
    def delete_by_id(self, entity_id: ID) -> None:
        with self._translate_errors("delete by id"):
            existing = self.session.get(self.model_class, entity_id)
            if existing is not None:
                self.session.delete(existing)

    def delete(self, entity: E) -> None:
        entity_id = getattr(entity, self._id_attribute)
        if entity_id is None:
            return
        self.delete_by_id(entity_id)

    def delete_all_by_id(self, ids: Iterable[ID]) -> None:
        for entity_id in ids:
            self.delete_by_id(entity_id)

    def delete_all(self, entities: Iterable[E] | None = None) -> None:
        targets = self.find_all() if entities is None else entities
        for entity in targets:
            self.delete(entity)

    def delete_in_batch(self, entities: Iterable[E]) -> None:
        self.delete_all_in_batch(entities)

    def delete_all_in_batch(self, entities: Iterable[E] | None = None) -> None:
        if entities is None:
            self._execute_delete(delete(self.model_class))
            return
        ids = [getattr(entity, self._id_attribute) for entity in entities]
        self.delete_all_by_id_in_batch(id_ for id_ in ids if id_ is not None)

    def delete_all_by_id_in_batch(self, ids: Iterable[ID]) -> None:
        id_list = list(ids)
        if not id_list:
            return
        self._execute_delete(delete(self.model_class).where(self._id_column.in_(id_list)))

    # ---------- Save ----------
    def save(self, entity: E) -> E:
        with self._translate_errors("save"):
            if getattr(entity, self._id_attribute) is None:
                self.session.add(entity)
                persisted = entity
            else:
                persisted = self.session.merge(entity)
            self.session.flush()
            self.session.refresh(persisted)
        logger.debug(
            f"{type(self).__name__} saved {self.model_class.__name__} "
            f"{getattr(persisted, self._id_attribute)!r}"
        )
        return persisted

    def save_all(self, entities: Iterable[E]) -> list[E]:
        return [self.save(entity) for entity in entities]

    def flush(self) -> None:
        with self._translate_errors("flush"):
            self.session.flush()

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
        # Two rows are enough to detect a non-unique result
        statement = select(self.model_class).where(self._example_predicate(example)).limit(2)
        with self._translate_errors("find one"):
            rows = list(self.session.exec(statement).all())
        if len(rows) > 1:
            raise IncorrectResultSizeError(1, self.count_by_example(example))
        return rows[0] if rows else None

    def find_all_by_example(self, example: Example[E], sort: Sort | None = None) -> list[E]:
        statement = self._apply_sort(
            select(self.model_class).where(self._example_predicate(example)), sort
        )
        with self._translate_errors("find all by example"):
            return list(self.session.exec(statement).all())

    def find_page_by_example(self, example: Example[E], pageable: Pageable) -> Page[E]:
        return self._find_page(self._example_predicate(example), pageable)

    def count_by_example(self, example: Example[E]) -> int:
        return self._count(self._example_predicate(example))

    def exists_by_example(self, example: Example[E]) -> bool:
        return self.count_by_example(example) > 0

    # ---------- Helpers ----------
    def _count(self, predicate: ColumnElement[bool]) -> int:
        statement = select(func.count()).select_from(self.model_class).where(predicate)
        with self._translate_errors("count"):
            return self.session.exec(statement).one()

    def _find_page(self, predicate: ColumnElement[bool], pageable: Pageable) -> Page[E]:
        total = self._count(predicate)
        if total <= pageable.offset:
            return Page([], pageable, total)

        statement = (
            self._apply_sort(select(self.model_class).where(predicate), pageable.sort)
            .offset(pageable.offset)
            .limit(pageable.page_size)
        )
        with self._translate_errors("find page"):
            content = list(self.session.exec(statement).all())
        return Page(content, pageable, total)

    def _execute_delete(self, statement: Any) -> None:
        with self._translate_errors("batch delete"):
            self.session.flush()
            result = self.session.connection().execute(statement)
            # Bulk deletes bypass the identity map
            self.session.expire_all()
        logger.debug(f"{type(self).__name__} batch deleted {result.rowcount} rows")

    def _column(self, name: str) -> Any:
        if name not in self._columns:
            raise RepositoryError(f"No column '{name}' on {self.model_class.__name__}")
        return getattr(self.model_class, name)

    def _apply_sort(self, statement: Any, sort: Sort | None) -> Any:
        if not sort:
            return statement
        clauses = []
        for order in sort:
            column = self._column(order.property)
            if order.ignore_case:
                column = func.lower(column)
            clauses.append(column.asc() if order.direction is Direction.ASC else column.desc())
        return statement.order_by(*clauses)

    def _example_predicate(self, example: Example[E]) -> ColumnElement[bool]:
        matcher = example.matcher
        predicates: list[ColumnElement[bool]] = []

        for path, value in probe_values(example.probe).items():
            if matcher.is_ignored_path(path) or path not in self._columns:
                continue
            column = getattr(self.model_class, path)
            if value is None:
                if matcher.null_handler is NullHandler.INCLUDE:
                    predicates.append(column.is_(None))
                continue
            if isinstance(value, str):
                predicates.append(
                    self._string_predicate(
                        column,
                        value,
                        matcher.string_matcher_for(path),
                        matcher.ignore_case_for(path),
                    )
                )
            else:
                predicates.append(column == value)

        if not predicates:
            return true()
        return and_(*predicates) if matcher.is_all_matching() else or_(*predicates)

    @staticmethod
    def _string_predicate(
        column: Any, value: str, string_matcher: StringMatcher, ignore_case: bool
    ) -> ColumnElement[bool]:
        match string_matcher:
            case StringMatcher.STARTING:
                if ignore_case:
                    return column.istartswith(value, autoescape=True)
                return column.startswith(value, autoescape=True)
            case StringMatcher.ENDING:
                if ignore_case:
                    return column.iendswith(value, autoescape=True)
                return column.endswith(value, autoescape=True)
            case StringMatcher.CONTAINING:
                if ignore_case:
                    return column.icontains(value, autoescape=True)
                return column.contains(value, autoescape=True)
            case _:
                if ignore_case:
                    return func.lower(column) == value.lower()
                return column == value

    @contextmanager
    def _translate_errors(self, action: str) -> Generator[None, None, None]:
        try:
            yield
        except IntegrityError as exc:
            raise DataIntegrityError(f"Failed to {action}: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            raise RepositoryError(f"Failed to {action}: {exc}") from exc
