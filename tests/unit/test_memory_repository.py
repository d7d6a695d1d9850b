"""Tests for InMemoryRepository and MappedRepository on top of it."""

from __future__ import annotations

import pytest

from mappedrepo.core.domain.example import Example, ExampleMatcher, StringMatcher
from mappedrepo.core.domain.exceptions import (
    EntityNotFoundError,
    IncorrectResultSizeError,
    RepositoryError,
)
from mappedrepo.core.domain.paging import Direction, Order, Pageable, Sort
from mappedrepo.core.infrastructure.database.mapped_repository import MappedRepository
from mappedrepo.core.infrastructure.database.memory_repository import (
    InMemoryRepository,
    sort_entities,
)
from tests.samples import User, UserEntity


def _entity(name: str, email: str | None = None, active: bool = True) -> UserEntity:
    return UserEntity(id=None, full_name=name, email_address=email, is_active=active)


# ============================================
# InMemoryRepository
# ============================================


class TestInMemoryRepository:
    def test_save_assigns_ids(self, memory_repository: InMemoryRepository) -> None:
        first = memory_repository.save(_entity("Alice"))
        second = memory_repository.save(_entity("Bob"))

        assert (first.id, second.id) == (1, 2)
        assert memory_repository.count() == 2

    def test_save_keeps_existing_id(self, memory_repository: InMemoryRepository) -> None:
        entity = UserEntity(id=42, full_name="Zed", email_address=None, is_active=True)

        assert memory_repository.save(entity).id == 42
        assert memory_repository.exists_by_id(42)

    def test_generated_id_skips_explicit_ids(self, memory_repository: InMemoryRepository) -> None:
        memory_repository.save(
            UserEntity(id=1, full_name="Explicit", email_address=None, is_active=True)
        )

        generated = memory_repository.save(_entity("Generated"))

        assert generated.id == 2
        assert memory_repository.count() == 2
        assert memory_repository.get_by_id(1).full_name == "Explicit"
        assert memory_repository.get_by_id(2).full_name == "Generated"

    def test_save_does_not_mutate_input(self, memory_repository: InMemoryRepository) -> None:
        entity = _entity("Alice")

        memory_repository.save(entity)

        assert entity.id is None

    def test_returned_entities_are_copies(self, memory_repository: InMemoryRepository) -> None:
        saved = memory_repository.save(_entity("Alice"))
        saved.full_name = "Changed"

        assert memory_repository.get_by_id(saved.id).full_name == "Alice"

    def test_custom_id_factory(self) -> None:
        repo: InMemoryRepository[UserEntity, str] = InMemoryRepository(
            id_factory=lambda: "fixed-id"
        )

        assert repo.save(_entity("Alice")).id == "fixed-id"

    def test_missing_id_attribute(self) -> None:
        repo: InMemoryRepository[UserEntity, int] = InMemoryRepository(id_attribute="pk")

        with pytest.raises(RepositoryError):
            repo.save(_entity("Alice"))

    def test_get_by_id_missing_raises(self, memory_repository: InMemoryRepository) -> None:
        with pytest.raises(EntityNotFoundError) as exc_info:
            memory_repository.get_by_id(5)

        assert exc_info.value.entity_id == 5
        assert exc_info.value.error_code == "NOT_FOUND"

    def test_delete_unknown_is_ignored(self, memory_repository: InMemoryRepository) -> None:
        memory_repository.delete_by_id(99)
        memory_repository.delete(_entity("never saved"))

        assert memory_repository.count() == 0

    def test_find_one_with_several_matches(self, memory_repository: InMemoryRepository) -> None:
        memory_repository.save_all([_entity("Alice"), _entity("Alice")])

        with pytest.raises(IncorrectResultSizeError) as exc_info:
            memory_repository.find_one(
                Example.of(_entity("Alice"), ExampleMatcher.matching().with_ignore_paths("id"))
            )

        assert exc_info.value.actual == 2

    def test_sort_with_nones_and_ties(self) -> None:
        entities = [
            UserEntity(1, "b", None, True),
            UserEntity(2, None, None, True),
            UserEntity(3, "a", None, False),
            UserEntity(4, "b", None, False),
        ]

        by_name = sort_entities(entities, Sort.by("full_name"))
        by_active_then_name_desc = sort_entities(
            entities,
            Sort((Order("is_active"), Order("full_name", Direction.DESC))),
        )

        assert [e.id for e in by_name] == [2, 3, 1, 4]
        assert [e.id for e in by_active_then_name_desc] == [4, 3, 1, 2]

    def test_sort_on_unknown_property(self, memory_repository: InMemoryRepository) -> None:
        memory_repository.save(_entity("Alice"))

        with pytest.raises(RepositoryError):
            memory_repository.find_all(Sort.by("nickname"))

    def test_sort_ignore_case(self) -> None:
        entities = [UserEntity(1, "b", None, True), UserEntity(2, "A", None, True)]

        result = sort_entities(entities, Sort((Order("full_name", ignore_case=True),)))

        assert [e.id for e in result] == [2, 1]


# ============================================
# MappedRepository over InMemoryRepository
# ============================================


class TestMappedInMemoryRepository:
    @pytest.fixture
    def saved(
        self, memory_users: MappedRepository[User, UserEntity, int], sample_users: list[User]
    ) -> list[User]:
        return memory_users.save_all(sample_users)

    def test_save_returns_generated_ids(
        self, memory_users: MappedRepository[User, UserEntity, int]
    ) -> None:
        user = User(name="Alice", email="alice@example.com")

        saved = memory_users.save(user)

        assert saved.id == 1
        assert saved.name == "Alice"
        assert user.id is None

    def test_find_by_id(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        assert memory_users.find_by_id(saved[0].id) == saved[0]
        assert memory_users.find_by_id(999) is None

    def test_find_all_and_sort(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        assert memory_users.find_all() == saved

        by_name = memory_users.find_all(Sort((Order("full_name", ignore_case=True),)).descending())

        assert [u.name for u in by_name] == ["Carol", "bob", "Alice"]

    def test_find_all_by_id_skips_unknown(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        result = memory_users.find_all_by_id([saved[2].id, 77, saved[0].id])

        assert result == [saved[2], saved[0]]

    def test_find_page(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        page = memory_users.find_page(Pageable.of(1, 2))

        assert page.content == [saved[2]]
        assert page.total_elements == 3
        assert page.total_pages == 2
        assert page.is_last

    def test_get_by_id_missing_propagates_not_found(
        self, memory_users: MappedRepository[User, UserEntity, int]
    ) -> None:
        with pytest.raises(EntityNotFoundError):
            memory_users.get_by_id(1)

        with pytest.raises(EntityNotFoundError):
            memory_users.get_one(1)

    def test_delete_operations(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        memory_users.delete(saved[0])
        assert not memory_users.exists_by_id(saved[0].id)

        memory_users.delete_all_by_id([saved[1].id])
        assert memory_users.count() == 1

        memory_users.delete_all()
        assert memory_users.count() == 0

    def test_batch_delete_operations(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        memory_users.delete_in_batch([saved[0]])
        memory_users.delete_all_by_id_in_batch([saved[1].id])
        assert memory_users.find_all() == [saved[2]]

        memory_users.delete_all_in_batch()
        assert memory_users.find_all() == []

    def test_save_updates_existing(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        updated = memory_users.save_and_flush(saved[0].model_copy(update={"name": "Alicia"}))

        assert updated.id == saved[0].id
        assert memory_users.get_by_id(saved[0].id).name == "Alicia"
        assert memory_users.count() == 3

    def test_query_by_example(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        # Matcher paths refer to entity attributes
        matcher = (
            ExampleMatcher.matching()
            .with_ignore_paths("is_active")
            .with_string_matcher(StringMatcher.ENDING)
        )
        example = Example.of(User(email="example.com"), matcher)

        assert memory_users.count_by_example(example) == 2
        assert memory_users.exists_by_example(example)
        assert memory_users.find_all_by_example(example, Sort.by("full_name").descending()) == [
            saved[1],
            saved[0],
        ]

        page = memory_users.find_page_by_example(example, Pageable.of(0, 1))
        assert page.content == [saved[0]]
        assert page.total_elements == 2

    def test_find_one(
        self, memory_users: MappedRepository[User, UserEntity, int], saved: list[User]
    ) -> None:
        inactive = Example.of(User(active=False))

        assert memory_users.find_one(inactive) == saved[2]
        assert memory_users.find_one(Example.of(User(name="nobody"))) is None
