"""
pytest 配置和共享 fixtures。

测试分层：
- unit/: 单元测试（纯内存，不依赖数据库）
- integration/: 集成测试（SQLModel + SQLite 内存数据库）

使用方法：
    # 运行所有测试
    uv run pytest

    # 只运行单元测试
    uv run pytest tests/unit/

    # 只运行集成测试
    uv run pytest tests/integration/ -m integration

    # 运行带覆盖率
    uv run pytest --cov=mappedrepo --cov-report=html
"""

from collections.abc import Generator
from unittest.mock import MagicMock

import pytest
from sqlalchemy import Engine
from sqlmodel import Session, SQLModel

from mappedrepo.core.config import Settings
from mappedrepo.core.domain.repository import Repository
from mappedrepo.core.infrastructure.database.mapped_repository import MappedRepository
from mappedrepo.core.infrastructure.database.memory_repository import InMemoryRepository
from mappedrepo.core.infrastructure.database.session import create_db_engine, create_tables
from mappedrepo.core.infrastructure.database.sqlmodel_repository import SQLModelRepository
from tests.samples import (
    User,
    UserEntity,
    UserEntityMapper,
    UserRecord,
    UserRecordMapper,
)

# ============================================
# 配置 Fixtures
# ============================================


@pytest.fixture
def test_settings() -> Settings:
    """测试环境配置。"""
    return Settings(
        ENVIRONMENT="local",
        LOG_LEVEL="DEBUG",
        DATABASE_URL="sqlite://",
        DATABASE_ECHO=False,
    )


# ============================================
# Mapper / Repository Fixtures
# ============================================


@pytest.fixture
def user_mapper() -> UserEntityMapper:
    return UserEntityMapper()


@pytest.fixture
def mock_entity_repository() -> MagicMock:
    """Mock 底层实体仓库（用于验证委托调用）。"""
    return MagicMock(spec=Repository)


@pytest.fixture
def mocked_users(
    mock_entity_repository: MagicMock, user_mapper: UserEntityMapper
) -> MappedRepository[User, UserEntity, int]:
    """基于 mock 仓库的 MappedRepository。"""
    return MappedRepository(mock_entity_repository, user_mapper)


@pytest.fixture
def memory_repository() -> InMemoryRepository[UserEntity, int]:
    return InMemoryRepository()


@pytest.fixture
def memory_users(
    memory_repository: InMemoryRepository[UserEntity, int], user_mapper: UserEntityMapper
) -> MappedRepository[User, UserEntity, int]:
    """基于内存仓库的 MappedRepository。"""
    return MappedRepository(memory_repository, user_mapper)


# ============================================
# 数据库 Fixtures
# ============================================


@pytest.fixture
def test_engine() -> Generator[Engine, None, None]:
    """创建 SQLite 内存数据库引擎。"""
    engine = create_db_engine("sqlite://", echo=False)
    create_tables(engine)

    yield engine

    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine: Engine) -> Generator[Session, None, None]:
    """提供事务回滚的数据库会话。

    每个测试在独立事务中运行，测试结束后自动回滚。
    """
    with Session(test_engine, expire_on_commit=False) as session:
        yield session
        session.rollback()


@pytest.fixture
def record_repository(db_session: Session) -> SQLModelRepository[UserRecord, int]:
    return SQLModelRepository(db_session, UserRecord)


@pytest.fixture
def db_users(
    record_repository: SQLModelRepository[UserRecord, int],
) -> MappedRepository[User, UserRecord, int]:
    """基于 SQLModel 仓库的 MappedRepository。"""
    return MappedRepository(record_repository, UserRecordMapper())


# ============================================
# 领域对象 Fixtures
# ============================================


@pytest.fixture
def sample_users() -> list[User]:
    """示例用户数据。"""
    return [
        User(name="Alice", email="alice@example.com"),
        User(name="bob", email="bob@example.com"),
        User(name="Carol", email="carol@example.org", active=False),
    ]
