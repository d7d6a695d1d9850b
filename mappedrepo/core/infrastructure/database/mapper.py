"""Base mapper for domain-entity conversion."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import TypeVar

D = TypeVar("D")  # Domain object type
E = TypeVar("E")  # Entity type


class BaseMapper[D, E](ABC):
    """Base mapper for converting between domain objects and persisted entities.

    Implementations must be side-effect free from the caller's point of view.
    By convention ``to_domain(to_entity(d))`` reconstructs ``d``.
    """

    @abstractmethod
    def to_domain(self, entity: E) -> D:
        """Convert persisted entity to domain object."""
        pass

    @abstractmethod
    def to_entity(self, domain: D) -> E:
        """Convert domain object to persisted entity."""
        pass

    def to_domain_list(self, entities: Iterable[E]) -> list[D]:
        """Convert entities to domain objects, keeping order."""
        return [self.to_domain(entity) for entity in entities]

    def to_entity_list(self, domains: Iterable[D]) -> list[E]:
        """Convert domain objects to entities, keeping order."""
        return [self.to_entity(domain) for domain in domains]


class FunctionMapper[D, E](BaseMapper[D, E]):
    """Mapper built from a pair of plain conversion functions."""

    def __init__(self, to_domain: Callable[[E], D], to_entity: Callable[[D], E]):
        self._to_domain = to_domain
        self._to_entity = to_entity

    def to_domain(self, entity: E) -> D:
        return self._to_domain(entity)

    def to_entity(self, domain: D) -> E:
        return self._to_entity(domain)
