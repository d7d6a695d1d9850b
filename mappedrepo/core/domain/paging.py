"""Paging and sorting value objects.

These are passed through repositories untouched; only ``Page`` content is ever
rewritten, via ``Page.map``.
"""

import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Self


class Direction(str, Enum):
    ASC = "ASC"
    DESC = "DESC"

    @property
    def is_ascending(self) -> bool:
        return self is Direction.ASC


@dataclass(frozen=True)
class Order:
    """Sort order for a single property."""

    property: str
    direction: Direction = Direction.ASC
    ignore_case: bool = False

    def with_direction(self, direction: Direction) -> "Order":
        return replace(self, direction=direction)

    def ignoring_case(self) -> "Order":
        return replace(self, ignore_case=True)


@dataclass(frozen=True)
class Sort:
    """Ordered collection of property orders."""

    orders: tuple[Order, ...] = ()

    @classmethod
    def by(cls, *properties: str, direction: Direction = Direction.ASC) -> Self:
        return cls(tuple(Order(name, direction) for name in properties))

    @classmethod
    def unsorted(cls) -> Self:
        return cls()

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def ascending(self) -> "Sort":
        return Sort(tuple(order.with_direction(Direction.ASC) for order in self.orders))

    def descending(self) -> "Sort":
        return Sort(tuple(order.with_direction(Direction.DESC) for order in self.orders))

    def and_(self, other: "Sort") -> "Sort":
        return Sort(self.orders + other.orders)

    def order_for(self, property_name: str) -> Order | None:
        for order in self.orders:
            if order.property == property_name:
                return order
        return None

    def __iter__(self) -> Iterator[Order]:
        return iter(self.orders)

    def __bool__(self) -> bool:
        return self.is_sorted


@dataclass(frozen=True)
class Pageable:
    """Zero-based page request."""

    page_number: int = 0
    page_size: int = 20
    sort: Sort = field(default_factory=Sort.unsorted)

    def __post_init__(self) -> None:
        if self.page_number < 0:
            raise ValueError("Page index must not be less than zero")
        if self.page_size < 1:
            raise ValueError("Page size must not be less than one")

    @classmethod
    def of(cls, page_number: int, page_size: int, sort: Sort | None = None) -> Self:
        return cls(page_number, page_size, sort or Sort.unsorted())

    @property
    def offset(self) -> int:
        return self.page_number * self.page_size

    @property
    def has_previous(self) -> bool:
        return self.page_number > 0

    def next(self) -> "Pageable":
        return replace(self, page_number=self.page_number + 1)

    def previous_or_first(self) -> "Pageable":
        if not self.has_previous:
            return self
        return replace(self, page_number=self.page_number - 1)

    def first(self) -> "Pageable":
        return replace(self, page_number=0)


@dataclass(frozen=True)
class Page[T]:
    """A window of results plus the metadata of the whole result set."""

    content: list[T]
    pageable: Pageable
    total_elements: int

    @property
    def number(self) -> int:
        return self.pageable.page_number

    @property
    def size(self) -> int:
        return self.pageable.page_size

    @property
    def sort(self) -> Sort:
        return self.pageable.sort

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size)

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    @property
    def is_first(self) -> bool:
        return not self.has_previous

    @property
    def is_last(self) -> bool:
        return not self.has_next

    def map[R](self, converter: Callable[[T], R]) -> "Page[R]":
        """Return a page with converted content and the same metadata."""
        return Page([converter(item) for item in self.content], self.pageable, self.total_elements)

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)
