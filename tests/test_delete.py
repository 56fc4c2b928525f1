import pytest

from uploadable import monkay
from uploadable.core.upload.base import Writer

deleted = []


class RecordingWriter(Writer):
    def write(self, files):
        return {name: True for name in files.values()}

    def delete(self, paths):
        deleted.append((self.field, list(paths)))
        return [self.field != "broken" for _ in paths]


@pytest.fixture(autouse=True)
def reset_deleted():
    deleted.clear()


def test_files_are_kept_by_default(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "pics/", "storage": storage}})
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)

    assert table.delete(entity) is True
    assert storage.exists("pics/me.png")


def test_keep_files_never_calls_the_writer(make_table, make_upload):
    table = make_table({"photo": {"path": "pics/", "writer": RecordingWriter}})
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)

    assert table.delete(entity) is True
    assert deleted == []


def test_files_are_deleted(make_table, storage, make_upload):
    table = make_table(
        {"photo": {"path": "pics/{id}/", "storage": storage, "keep_files_on_delete": False}}
    )
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)
    assert storage.exists(f"pics/{entity.id}/me.png")

    assert table.delete(entity) is True
    assert not storage.exists(f"pics/{entity.id}/me.png")


def test_delete_of_loaded_record(make_table, storage, make_upload):
    table = make_table(
        {"photo": {"path": "/pics/", "storage": storage, "keep_files_on_delete": False}}
    )
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)

    assert table.delete(table.get(entity.id)) is True
    assert not storage.exists("pics/me.png")


def test_delete_twice_is_not_a_failure(make_table, storage, make_upload):
    table = make_table(
        {"photo": {"path": "pics/", "storage": storage, "keep_files_on_delete": False}}
    )
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)
    behavior = table.behaviors["UploadBehavior"]

    assert table.delete(entity) is True
    assert behavior.after_delete(table, entity=entity) is None


def test_records_without_files_are_skipped(make_table):
    table = make_table({"photo": {"writer": RecordingWriter, "keep_files_on_delete": False}})
    entity = table.new_entity({"title": "no file"})
    table.save(entity)

    assert table.delete(entity) is True
    assert deleted == []


def test_delete_path(make_table, make_upload):
    table = make_table(
        {"photo": {"path": "pics/", "writer": RecordingWriter, "keep_files_on_delete": False}}
    )
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)

    table.delete(entity)

    assert deleted == [("photo", ["pics/me.png"])]


def make_two_fields(make_table):
    return make_table(
        {
            "broken": {"writer": RecordingWriter, "keep_files_on_delete": False},
            "photo": {"writer": RecordingWriter, "keep_files_on_delete": False},
        },
        fields=("broken", "photo"),
    )


def test_failed_delete_stops_at_first_failure(make_table, make_upload):
    table = make_two_fields(make_table)
    entity = table.new_entity({"broken": make_upload(), "photo": make_upload(name="p.png")})
    table.save(entity)

    assert table.delete(entity) is False
    assert [field for field, _ in deleted] == ["broken"]


def test_failed_delete_can_process_every_field(make_table, make_upload, monkeypatch):
    monkeypatch.setattr(monkay.settings, "upload_fail_fast_on_delete", False)
    table = make_two_fields(make_table)
    entity = table.new_entity({"broken": make_upload(), "photo": make_upload(name="p.png")})
    table.save(entity)

    assert table.delete(entity) is False
    assert [field for field, _ in deleted] == ["broken", "photo"]


def test_delete_of_unsaved_record(make_table):
    table = make_table({"photo": {"writer": RecordingWriter, "keep_files_on_delete": False}})

    assert table.delete(table.new_entity({"photo": "x.png"})) is False
    assert deleted == []
