"""Tests specific to the JSON file backend."""

import json
from pathlib import Path

import pytest

from waitlist_stage.services.errors import StorageUnavailableError
from waitlist_stage.services.json_store import JsonFileSignupStore

from tests.conftest import SEED


def test_missing_file_is_created_with_seed(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "emails.json"

    JsonFileSignupStore(path, seed_count=SEED)

    assert json.loads(path.read_text()) == {"emails": [], "totalCount": SEED}


def test_persisted_layout(json_store: JsonFileSignupStore) -> None:
    json_store.try_add_signup("a@x.com")

    document = json.loads(json_store.path.read_text())

    assert document["totalCount"] == SEED + 1
    assert [entry["email"] for entry in document["emails"]] == ["a@x.com"]
    assert "submittedAt" in document["emails"][0]


def test_reload_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "emails.json"
    first = JsonFileSignupStore(path, seed_count=SEED)
    first.try_add_signup("a@x.com")
    first.try_add_signup("b@x.com")
    written = path.read_text()

    reloaded = JsonFileSignupStore(path, seed_count=SEED)

    assert reloaded.snapshot() == first.snapshot()
    assert reloaded.verify_invariant()
    # Reloading does not rewrite the file.
    assert path.read_text() == written


def test_existing_file_is_not_reseeded(tmp_path: Path) -> None:
    path = tmp_path / "emails.json"
    path.write_text(json.dumps({"emails": [], "totalCount": 5000}))

    store = JsonFileSignupStore(path, seed_count=SEED)

    assert store.get_count() == 5000


def test_corrupt_file_is_storage_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "emails.json"
    path.write_text("{not json")
    store = JsonFileSignupStore(path, seed_count=SEED)

    with pytest.raises(StorageUnavailableError):
        store.get_count()
    with pytest.raises(StorageUnavailableError):
        store.try_add_signup("a@x.com")


def test_write_failure_leaves_count_unchanged(
    json_store: JsonFileSignupStore, mocker
) -> None:
    mocker.patch(
        "waitlist_stage.services.json_store.os.replace",
        side_effect=OSError("disk full"),
    )

    with pytest.raises(StorageUnavailableError):
        json_store.try_add_signup("a@x.com")

    assert json_store.get_count() == SEED
    assert list(json_store.path.parent.glob("*.tmp")) == []
