from __future__ import annotations

from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.api.repositories import InMemoryRepository
from src.api.settings import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        persistence_backend="memory",
        sqlite_db_path="./data/test.db",
        mongo_uri="mongodb://localhost:27017/tasks",
        mongo_db_name="tasks",
        mongo_timeout_ms=100,
        cors_allow_origins=["http://localhost:3000"],
        host="127.0.0.1",
        port=5000,
        log_level="INFO",
    )


@pytest.fixture()
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def app(settings: Settings, repo: InMemoryRepository) -> FastAPI:
    return create_app(settings, repository=repo)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    # entering the context runs the lifespan (startup ping)
    with TestClient(app) as c:
        yield c
