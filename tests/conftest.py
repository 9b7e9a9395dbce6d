from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from waitlist_stage.core.settings import Settings
from waitlist_stage.db.session import build_engine
from waitlist_stage.main import create_app
from waitlist_stage.services.broadcast import BroadcastChannel
from waitlist_stage.services.counter import CounterService
from waitlist_stage.services.json_store import JsonFileSignupStore
from waitlist_stage.services.sql_store import SqlSignupStore
from waitlist_stage.services.store import SignupStore

SEED = 1247


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    """Return settings isolated from the environment and any .env file."""
    values: dict[str, object] = {
        "storage_backend": "sql",
        "database_url": f"sqlite:///{tmp_path / 'waitlist.db'}",
        "json_store_path": str(tmp_path / "emails.json"),
        "seed_count": SEED,
        "counter_poll_interval_seconds": 0.01,
        "counter_reconnect_delay_seconds": 0.01,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    """Provide settings pointing every backend at a temporary directory."""
    return make_settings(tmp_path)


@pytest.fixture()
def sql_store(tmp_path: Path) -> Iterator[SqlSignupStore]:
    store = SqlSignupStore(build_engine(f"sqlite:///{tmp_path / 'store.db'}"), seed_count=SEED)
    try:
        yield store
    finally:
        store.close()


@pytest.fixture()
def json_store(tmp_path: Path) -> JsonFileSignupStore:
    return JsonFileSignupStore(tmp_path / "emails.json", seed_count=SEED)


@pytest.fixture(params=["sql", "json"])
def store(request: pytest.FixtureRequest, tmp_path: Path) -> Iterator[SignupStore]:
    """Run a test once against each storage backend."""
    if request.param == "sql":
        backend: SignupStore = SqlSignupStore(
            build_engine(f"sqlite:///{tmp_path / 'store.db'}"), seed_count=SEED
        )
    else:
        backend = JsonFileSignupStore(tmp_path / "emails.json", seed_count=SEED)
    try:
        yield backend
    finally:
        backend.close()


@pytest.fixture()
def channel() -> BroadcastChannel:
    return BroadcastChannel(queue_size=8)


@pytest.fixture()
def counter_service(store: SignupStore, channel: BroadcastChannel) -> CounterService:
    return CounterService(store, channel)


@pytest.fixture()
def app(test_settings: Settings) -> FastAPI:
    return create_app(test_settings)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client
