from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlmodel import Session

from tasktracker.client import TaskClient
from tasktracker.database import Database
from tasktracker.main import create_app


@pytest.fixture
def database() -> Iterator[Database]:
    """A fresh in-memory store per test."""
    with Database("sqlite://") as db:
        yield db


@pytest.fixture
def session(database: Database) -> Iterator[Session]:
    with database.session() as s:
        yield s


@pytest.fixture
def app(database: Database) -> FastAPI:
    return create_app(database)


@pytest.fixture
def http(app: FastAPI) -> Iterator[TestClient]:
    # Entering the client runs the app lifespan (opens the store).
    with TestClient(app) as client:
        yield client


@pytest.fixture
def task_client(http: TestClient) -> TaskClient:
    return TaskClient(http_client=http)
