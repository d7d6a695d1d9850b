"""Domain-object repositories on top of entity repositories.

Exposes the repository contract, the mapped-repository adapter and its
supporting value types.
"""

from mappedrepo.core.domain.example import (
    Example,
    ExampleMatcher,
    MatchMode,
    NullHandler,
    PropertySpecifier,
    StringMatcher,
)
from mappedrepo.core.domain.exceptions import (
    DataIntegrityError,
    EntityNotFoundError,
    IncorrectResultSizeError,
    RepositoryError,
)
from mappedrepo.core.domain.paging import Direction, Order, Page, Pageable, Sort
from mappedrepo.core.domain.repository import Repository
from mappedrepo.core.infrastructure.database.mapped_repository import MappedRepository
from mappedrepo.core.infrastructure.database.mapper import BaseMapper, FunctionMapper
from mappedrepo.core.infrastructure.database.memory_repository import InMemoryRepository

__all__ = [
    "BaseMapper",
    "DataIntegrityError",
    "Direction",
    "EntityNotFoundError",
    "Example",
    "ExampleMatcher",
    "FunctionMapper",
    "InMemoryRepository",
    "IncorrectResultSizeError",
    "MappedRepository",
    "MatchMode",
    "NullHandler",
    "Order",
    "Page",
    "Pageable",
    "PropertySpecifier",
    "Repository",
    "RepositoryError",
    "Sort",
    "StringMatcher",
]
