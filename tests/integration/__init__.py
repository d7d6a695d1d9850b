"""集成测试包。

集成测试特点：
- 使用 SQLite 内存数据库（无需外部服务）
- 通过 MappedRepository 验证 SQLModel 仓库的完整读写路径
- 每个测试使用独立会话并在结束时回滚

运行方式：
    uv run pytest tests/integration/ -v -m integration
"""
