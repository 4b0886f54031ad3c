"""Tests for trash listing, purging and emptying."""

import logging
from datetime import timedelta

import pytest

from pixshelf.domain.errors import Forbidden, InvalidInput, NotFound
from pixshelf.domain.trash import PurgeSummary, TrashKind
from pixshelf.services.images import log_and_continue
from tests.conftest import FakeObjectHost, seed_image, tick


def test_scenario_trash_then_restore_album(
    album_service, image_service, trash_service, alice
) -> None:
    album = album_service.create(alice, "Trip")
    image = image_service.upload(
        alice,
        album.id,
        b"\xff\xd8jpeg",
        "img1.jpg",
        "image/jpeg",
        tags=["beach", "sunset"],
    )
    album_service.soft_delete(alice, album.id)

    items = trash_service.list_trash(alice)

    by_kind = {item.kind: item for item in items}
    assert len(items) == 2
    assert by_kind[TrashKind.ALBUM].name == "Trip"
    assert by_kind[TrashKind.ALBUM].item_count == 1
    assert by_kind[TrashKind.IMAGE].id == image.id
    assert by_kind[TrashKind.IMAGE].original_album_name == "Trip"
    assert by_kind[TrashKind.IMAGE].tags == ("beach", "sunset")

    album_service.restore(alice, album.id)

    listed = image_service.list_images(alice, album.id)
    assert [listed_image.id for listed_image in listed] == [image.id]
    assert not listed[0].is_trashed
    assert trash_service.list_trash(alice) == []


def test_collaborator_sees_trashed_images_but_not_album(
    album_service, image_repository, trash_service, alice, bob
) -> None:
    album = album_service.create(alice, "Shared")
    album_service.share(alice, album.id, [bob.email])
    image = seed_image(image_repository, album.id, alice.user_id)
    album_service.soft_delete(alice, album.id)

    items = trash_service.list_trash(bob)

    assert [(item.kind, item.id) for item in items] == [(TrashKind.IMAGE, image.id)]


def test_stranger_sees_nothing(
    album_service, image_repository, trash_service, alice, carol
) -> None:
    album = album_service.create(alice, "Private")
    seed_image(image_repository, album.id, alice.user_id)
    album_service.soft_delete(alice, album.id)

    assert trash_service.list_trash(carol) == []


def test_list_trash_is_sorted_by_deletion_time(
    album_service, image_repository, trash_service, alice
) -> None:
    album = album_service.create(alice, "Trip")
    older = seed_image(image_repository, album.id, alice.user_id, name="older")
    newer = seed_image(image_repository, album.id, alice.user_id, name="newer")
    deleted_at = tick()
    image_repository.trash_image(newer.id, deleted_at, album.id, album.name)
    image_repository.trash_image(
        older.id, deleted_at - timedelta(hours=1), album.id, album.name
    )

    names = [item.name for item in trash_service.list_trash(alice)]

    assert names == ["newer", "older"]


def test_purge_image_removes_record_and_asset_once(
    album_service, image_service, image_repository, trash_service, object_host, alice
) -> None:
    album = album_service.create(alice, "Trip")
    image = seed_image(image_repository, album.id, alice.user_id, public_id="p/1")
    image_service.soft_delete(alice, album.id, image.id)

    summary = trash_service.purge(alice, image.id, TrashKind.IMAGE)

    assert summary == PurgeSummary(images=1)
    assert object_host.deleted == ["p/1"]
    assert image_repository.get_image(image.id) is None
    with pytest.raises(NotFound):
        image_service.get(alice, album.id, image.id)


def test_purge_image_survives_object_host_failure(
    album_service, image_service, image_repository, trash_service, object_host, alice
) -> None:
    album = album_service.create(alice, "Trip")
    image = seed_image(image_repository, album.id, alice.user_id, public_id="p/bad")
    image_service.soft_delete(alice, album.id, image.id)
    object_host.failing_deletes.add("p/bad")

    summary = trash_service.purge_image(alice, image.id)

    assert summary == PurgeSummary(images=1, asset_failures=1)
    assert image_repository.get_image(image.id) is None


def test_purge_image_checks_state_and_permission(
    album_service, image_service, image_repository, trash_service, alice, carol
) -> None:
    album = album_service.create(alice, "Trip")
    image = seed_image(image_repository, album.id, alice.user_id)

    with pytest.raises(NotFound, match="Deleted image not found"):
        trash_service.purge_image(alice, image.id)

    image_service.soft_delete(alice, album.id, image.id)
    with pytest.raises(Forbidden):
        trash_service.purge_image(carol, image.id)


def test_purge_album_removes_album_and_its_images(
    album_service, album_repository, image_repository, trash_service, object_host, alice
) -> None:
    album = album_service.create(alice, "Trip")
    first = seed_image(image_repository, album.id, alice.user_id, public_id="a/1")
    second = seed_image(image_repository, album.id, alice.user_id, public_id="a/2")

    with pytest.raises(NotFound):
        trash_service.purge(alice, album.id, TrashKind.ALBUM)

    album_service.soft_delete(alice, album.id)
    summary = trash_service.purge(alice, album.id, TrashKind.ALBUM)

    assert summary == PurgeSummary(images=2, albums=1)
    assert sorted(object_host.deleted) == ["a/1", "a/2"]
    assert album_repository.get_album(album.id) is None
    assert image_repository.get_image(first.id) is None
    assert image_repository.get_image(second.id) is None


def test_purge_rejects_unknown_kind(trash_service, alice) -> None:
    with pytest.raises(InvalidInput):
        trash_service.purge(alice, alice.user_id, "folder")  # type: ignore[arg-type]


def test_empty_trash_is_best_effort(
    album_service,
    image_service,
    album_repository,
    image_repository,
    trash_service,
    object_host,
    alice,
) -> None:
    kept = album_service.create(alice, "Kept")
    loose = seed_image(image_repository, kept.id, alice.user_id, public_id="k/1")
    live = seed_image(image_repository, kept.id, alice.user_id, public_id="k/2")
    image_service.soft_delete(alice, kept.id, loose.id)
    gone = album_service.create(alice, "Gone")
    seed_image(image_repository, gone.id, alice.user_id, public_id="g/1")
    seed_image(image_repository, gone.id, alice.user_id, public_id="g/2")
    album_service.soft_delete(alice, gone.id)
    object_host.failing_deletes.add("g/1")

    summary = trash_service.empty(alice)

    assert summary == PurgeSummary(images=3, albums=1, asset_failures=1)
    assert trash_service.list_trash(alice) == []
    assert album_repository.get_album(gone.id) is None
    assert album_repository.get_album(kept.id) is not None
    assert image_repository.get_image(live.id) is not None


def test_log_and_continue_reports_failures(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("pixshelf"), "propagate", True)
    host = FakeObjectHost(failing_deletes={"broken"})

    with caplog.at_level(logging.WARNING, logger="pixshelf.services.images"):
        assert log_and_continue(host, "fine") is True
        assert log_and_continue(host, "broken") is False

    assert host.deleted == ["fine"]
    assert "Failed to delete hosted asset" in caplog.text
