"""Query-by-example value objects.

An ``Example`` pairs a partially populated probe with an ``ExampleMatcher``
describing how probe attributes are compared against stored values. Only
top-level attributes take part in matching.
"""

import dataclasses
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Self

from pydantic import BaseModel


class StringMatcher(str, Enum):
    DEFAULT = "DEFAULT"
    EXACT = "EXACT"
    STARTING = "STARTING"
    ENDING = "ENDING"
    CONTAINING = "CONTAINING"


class NullHandler(str, Enum):
    IGNORE = "IGNORE"
    INCLUDE = "INCLUDE"


class MatchMode(str, Enum):
    ALL = "ALL"
    ANY = "ANY"


@dataclass(frozen=True)
class PropertySpecifier:
    """Matching overrides for one property path."""

    path: str
    string_matcher: StringMatcher | None = None
    ignore_case: bool | None = None


@dataclass(frozen=True)
class ExampleMatcher:
    """Immutable matching configuration of an ``Example``."""

    match_mode: MatchMode = MatchMode.ALL
    null_handler: NullHandler = NullHandler.IGNORE
    string_matcher: StringMatcher = StringMatcher.DEFAULT
    ignore_case: bool = False
    ignored_paths: frozenset[str] = frozenset()
    property_specifiers: tuple[PropertySpecifier, ...] = ()

    @classmethod
    def matching(cls) -> Self:
        """Matcher requiring all predicates to match."""
        return cls()

    @classmethod
    def matching_any(cls) -> Self:
        """Matcher requiring at least one predicate to match."""
        return cls(match_mode=MatchMode.ANY)

    def with_ignore_paths(self, *paths: str) -> "ExampleMatcher":
        return replace(self, ignored_paths=self.ignored_paths | frozenset(paths))

    def with_ignore_case(self, *paths: str) -> "ExampleMatcher":
        """Ignore case for the given paths, or for every path when none are given."""
        if not paths:
            return replace(self, ignore_case=True)
        matcher = self
        for path in paths:
            matcher = matcher.with_matcher(path, ignore_case=True)
        return matcher

    def with_string_matcher(self, string_matcher: StringMatcher) -> "ExampleMatcher":
        return replace(self, string_matcher=string_matcher)

    def with_include_null_values(self) -> "ExampleMatcher":
        return replace(self, null_handler=NullHandler.INCLUDE)

    def with_ignore_null_values(self) -> "ExampleMatcher":
        return replace(self, null_handler=NullHandler.IGNORE)

    def with_matcher(
        self,
        path: str,
        string_matcher: StringMatcher | None = None,
        ignore_case: bool | None = None,
    ) -> "ExampleMatcher":
        """Add or update the override for ``path``."""
        current = self._specifier_for(path) or PropertySpecifier(path)
        updated = replace(
            current,
            string_matcher=string_matcher if string_matcher is not None else current.string_matcher,
            ignore_case=ignore_case if ignore_case is not None else current.ignore_case,
        )
        others = tuple(spec for spec in self.property_specifiers if spec.path != path)
        return replace(self, property_specifiers=others + (updated,))

    def is_ignored_path(self, path: str) -> bool:
        return path in self.ignored_paths

    def is_all_matching(self) -> bool:
        return self.match_mode is MatchMode.ALL

    def string_matcher_for(self, path: str) -> StringMatcher:
        spec = self._specifier_for(path)
        if spec is not None and spec.string_matcher is not None:
            return spec.string_matcher
        return self.string_matcher

    def ignore_case_for(self, path: str) -> bool:
        spec = self._specifier_for(path)
        if spec is not None and spec.ignore_case is not None:
            return spec.ignore_case
        return self.ignore_case

    def _specifier_for(self, path: str) -> PropertySpecifier | None:
        for spec in self.property_specifiers:
            if spec.path == path:
                return spec
        return None


def probe_values(probe: Any) -> dict[str, Any]:
    """Return the top-level attribute values of a probe object."""
    if isinstance(probe, BaseModel):
        return {name: getattr(probe, name) for name in type(probe).model_fields}
    if dataclasses.is_dataclass(probe) and not isinstance(probe, type):
        return {f.name: getattr(probe, f.name) for f in dataclasses.fields(probe)}
    return {name: value for name, value in vars(probe).items() if not name.startswith("_")}


def match_string(value: str, candidate: str, string_matcher: StringMatcher, ignore_case: bool) -> bool:
    if ignore_case:
        value, candidate = value.casefold(), candidate.casefold()
    match string_matcher:
        case StringMatcher.STARTING:
            return candidate.startswith(value)
        case StringMatcher.ENDING:
            return candidate.endswith(value)
        case StringMatcher.CONTAINING:
            return value in candidate
        case _:
            return candidate == value


@dataclass(frozen=True)
class Example[T]:
    """A probe object together with its matching configuration."""

    probe: T
    matcher: ExampleMatcher = field(default_factory=ExampleMatcher.matching)

    @classmethod
    def of(cls, probe: T, matcher: ExampleMatcher | None = None) -> "Example[T]":
        return cls(probe, matcher if matcher is not None else ExampleMatcher.matching())

    @property
    def probe_type(self) -> type:
        return type(self.probe)

    def with_probe[P](self, probe: P) -> "Example[P]":
        """Return an example for another probe sharing this matcher."""
        return Example(probe, self.matcher)

    def matches(self, candidate: Any) -> bool:
        """Evaluate the example against a candidate object in memory."""
        results: list[bool] = []
        for path, value in probe_values(self.probe).items():
            if self.matcher.is_ignored_path(path):
                continue
            actual = getattr(candidate, path, None)
            if value is None:
                if self.matcher.null_handler is NullHandler.INCLUDE:
                    results.append(actual is None)
                continue
            if isinstance(value, str) and isinstance(actual, str):
                results.append(
                    match_string(
                        value,
                        actual,
                        self.matcher.string_matcher_for(path),
                        self.matcher.ignore_case_for(path),
                    )
                )
            else:
                results.append(actual == value)

        if not results:
            return True
        return all(results) if self.matcher.is_all_matching() else any(results)
