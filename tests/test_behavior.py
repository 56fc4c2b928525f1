import pytest
import sqlalchemy

from uploadable import FieldConfig, UploadDatum, UploadError, Validator
from uploadable.core.upload.base import Writer
from uploadable.core.upload.behavior import DEFERRED_UPLOADS
from uploadable.core.upload.types import FILE_TYPE, FileType
from uploadable.core.upload.writers import DefaultWriter
from uploadable.exceptions import (
    DeferredWriteFailed,
    InvalidStrategyError,
    MetadataNotPersisted,
    PathResolutionError,
    RecordNotSaved,
)
from tests.conftest import make_columns


class FailingWriter(Writer):
    def write(self, files):
        return {name: False for name in files.values()}

    def delete(self, paths):
        return [False for _ in paths]


def spy_update_all(table, monkeypatch):
    calls = []
    update_all = table.update_all

    def spy(values, conditions):
        row = table.get(conditions["id"])
        calls.append({"values": dict(values), "conditions": dict(conditions), "before": row})
        return update_all(values, conditions)

    monkeypatch.setattr(table, "update_all", spy)
    return calls


def test_fields_get_the_upload_type(make_table):
    table = make_table({"photo": {"path": "pics/"}})

    assert table.schema.column_type("photo") == FILE_TYPE
    assert table.schema.types[FILE_TYPE] is FileType
    assert isinstance(table.table.c.photo.type, FileType)
    assert table.schema.column_type("dir") is None


def test_configuration_forms(make_table):
    table = make_table(["photo", {"document": {"path": "docs/"}}], fields=("photo", "document"))
    behavior = table.behaviors["UploadBehavior"]

    assert list(behavior.config) == ["photo", "document"]
    assert behavior.config["photo"].path == "files{DS}{table}{DS}{field}{DS}"
    assert behavior.config["document"].path == "docs/"


def test_invalid_strategy_fails_when_attaching(make_table):
    with pytest.raises(InvalidStrategyError):
        make_table({"photo": {"writer": "nope"}})


def test_save_new_record(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "pics{DS}{field}{DS}", "storage": storage}})
    entity = table.new_entity({"title": "hello", "photo": make_upload(content=b"12345")})

    assert table.save(entity) is entity

    row = table.get(entity.id)
    assert row.photo == "me.png"
    assert row.dir == "pics/photo"
    assert row.size == 5
    assert row.type == "image/png"
    assert storage.exists("pics/photo/me.png")


def test_single_pass_runs_each_pipeline_once(make_table, storage, make_upload, monkeypatch):
    table = make_table({"photo": {"path": "pics/", "storage": storage}})
    calls = spy_update_all(table, monkeypatch)
    pipeline = table.behaviors["UploadBehavior"].pipelines["photo"]
    runs = []
    run = pipeline.run

    def counting_run(table, entity):
        runs.append(entity.to_dict())
        return run(table, entity)

    monkeypatch.setattr(pipeline, "run", counting_run)
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)

    assert len(runs) == 1
    assert "id" not in runs[0]
    assert calls == []


def test_deferred_field_on_new_record(make_table, storage, make_upload, monkeypatch, engine):
    table = make_table(
        {"avatar": {"path": "/uploads/{id}/avatar", "storage": storage}}, fields=("avatar",)
    )
    with engine.begin() as connection:
        connection.execute(table.table.insert().values(id=41, title="first"))
    calls = spy_update_all(table, monkeypatch)

    entity = table.new_entity({"title": "me", "avatar": make_upload(name="me.png")})
    assert table.save(entity) is entity

    assert entity.id == 42
    assert entity.avatar == "avatar.png"
    assert entity.dir == "/uploads/42"
    assert not entity.is_dirty()
    assert storage.exists("uploads/42/avatar.png")

    assert len(calls) == 1
    assert calls[0]["conditions"] == {"id": 42}
    assert calls[0]["values"] == {
        "avatar": "avatar.png",
        "dir": "/uploads/42",
        "size": 5,
        "type": "image/png",
    }
    assert calls[0]["before"].avatar == ""

    row = table.get(42)
    assert row.avatar == "avatar.png"
    assert row.dir == "/uploads/42"


def test_save_options_are_copied(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "uploads/{primaryKey}/", "storage": storage}})
    options = {"source": "test"}

    table.save(table.new_entity({"photo": make_upload()}), options)

    assert options == {"source": "test"}
    assert DEFERRED_UPLOADS not in options


def test_deferred_uploads_are_not_stored_on_the_record(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "uploads/{primaryKey}/", "storage": storage}})
    entity = table.new_entity({"photo": make_upload()})

    table.save(entity)

    assert set(entity.to_dict()) == {"id", "photo", "dir", "size", "type"}


def test_deferred_field_on_existing_record_is_not_deferred(
    make_table, storage, make_upload, monkeypatch
):
    table = make_table({"photo": {"path": "uploads/{id}/", "storage": storage}})
    entity = table.new_entity({"title": "plain"})
    table.save(entity)
    calls = spy_update_all(table, monkeypatch)

    table.patch_entity(entity, {"photo": make_upload()})
    assert table.save(entity) is entity

    assert calls == []
    assert table.get(entity.id).dir == f"uploads/{entity.id}"


def test_skipped_upload_leaves_record_alone(make_table, storage, make_upload):
    table = make_table(
        {"doc": {"path": "docs/", "storage": storage}}, fields=("doc",)
    )
    entity = table.new_entity({"title": "x", "doc": make_upload(error=UploadError.PARTIAL)})

    assert table.save(entity) is entity

    assert isinstance(entity.doc, dict)
    assert entity.get("dir") is None
    assert entity.get("size") is None
    assert entity.get("type") is None
    row = table.get(entity.id)
    assert row.doc is None
    assert row.dir is None


def test_writer_failure_vetoes_the_save(make_table, storage, make_upload):
    table = make_table(
        {
            "photo": {"path": "pics/", "storage": storage},
            "document": {"path": "docs/", "writer": FailingWriter, "fields": {"dir": "title"}},
        },
        fields=("photo", "document"),
    )
    entity = table.new_entity({"photo": make_upload(), "document": make_upload(name="cv.pdf")})

    assert table.save(entity) is False

    assert entity.photo == "me.png"
    assert entity.dir == "pics"
    assert isinstance(entity.document, dict)
    assert entity.get("title") is None
    assert entity.is_new
    with table.engine.connect() as connection:
        assert connection.execute(sqlalchemy.select(table.table)).all() == []


def test_writer_failure_in_deferred_pass(make_table, storage, make_upload, monkeypatch):
    table = make_table(
        {
            "photo": {"path": "pics/{id}/", "storage": storage},
            "document": {"path": "docs/{id}/", "writer": FailingWriter},
        },
        fields=("photo", "document"),
    )
    calls = spy_update_all(table, monkeypatch)
    entity = table.new_entity({"photo": make_upload(), "document": make_upload(name="cv.pdf")})

    with pytest.raises(DeferredWriteFailed):
        table.save(entity)

    assert entity.photo == "me.png"
    assert entity.dir == f"pics/{entity.id}"
    assert calls == []
    assert table.get(entity.id).document == ""
    with pytest.raises(MetadataNotPersisted):
        table.save_or_fail(
            table.new_entity({"photo": make_upload(), "document": make_upload()})
        )


def test_vetoed_save_restores_deferred_uploads(make_table, storage, make_upload):
    table = make_table(
        {
            "photo": {"path": "pics/{id}/", "storage": storage},
            "document": {"path": "docs/", "writer": FailingWriter},
        },
        fields=("photo", "document"),
    )
    upload = make_upload()
    entity = table.new_entity({"photo": upload, "document": make_upload(name="cv.pdf")})

    assert table.save(entity) is False

    assert UploadDatum.coerce(entity.photo) == UploadDatum.coerce(upload)
    assert entity.is_new
    assert not storage.exists("pics")

    table.behaviors["UploadBehavior"].pipelines["document"].writer = DefaultWriter(
        "document", FieldConfig(path="docs/", storage=storage)
    )
    assert table.save(entity) is entity
    assert entity.photo == "me.png"
    assert storage.exists(f"pics/{entity.id}/me.png")
    assert table.get(entity.id).photo == "me.png"


def test_path_error_restores_deferred_uploads(make_table, storage, make_upload):
    table = make_table(
        {
            "photo": {"path": "pics/{id}/", "storage": storage},
            "document": {"path": "docs/{field-value:title}/", "storage": storage},
        },
        fields=("photo", "document"),
    )
    upload = make_upload()
    entity = table.new_entity({"photo": upload, "document": make_upload(name="cv.pdf")})

    with pytest.raises(PathResolutionError):
        table.save(entity)

    assert UploadDatum.coerce(entity.photo) == UploadDatum.coerce(upload)


def test_metadata_not_persisted(make_table, storage, make_upload, monkeypatch):
    table = make_table({"photo": {"path": "pics/{id}/", "storage": storage}})
    monkeypatch.setattr(table, "update_all", lambda values, conditions: 0)
    entity = table.new_entity({"photo": make_upload()})

    with pytest.raises(MetadataNotPersisted):
        table.save(entity)
    assert not entity.is_dirty()


def test_explicit_primary_key_with_deferred_path(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "pics/{id}/", "storage": storage}})
    entity = table.new_entity({"id": 9, "photo": make_upload()})

    table.save(entity)

    assert table.get(9).dir == "pics/9"


def test_path_errors_propagate(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "{field-value:title}/", "storage": storage}})
    entity = table.new_entity({"photo": make_upload()})

    with pytest.raises(PathResolutionError):
        table.save(entity)


def test_update_replaces_file(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "pics/", "storage": storage}})
    entity = table.new_entity({"photo": make_upload(name="first.png")})
    table.save(entity)

    table.patch_entity(entity, {"photo": make_upload(name="second.png", content=b"22")})
    table.save(entity)

    row = table.get(entity.id)
    assert row.photo == "second.png"
    assert row.size == 2
    assert storage.exists("pics/second.png")


def test_empty_upload_is_stripped_when_allowed(make_table, storage, make_upload):
    validator = Validator().allow_empty("photo")
    table = make_table({"photo": {"path": "pics/", "storage": storage}}, validator=validator)
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)

    table.patch_entity(entity, {"title": "new", "photo": make_upload(error=UploadError.NO_FILE)})
    table.save(entity)

    row = table.get(entity.id)
    assert row.title == "new"
    assert row.photo == "me.png"


def test_empty_upload_is_kept_when_not_allowed(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "pics/", "storage": storage}})

    entity = table.new_entity({"photo": make_upload(error=UploadError.NO_FILE)})

    assert entity.photo["error"] == UploadError.NO_FILE


def test_empty_upload_allowed_on_update_only(make_table, storage, make_upload):
    validator = Validator().allow_empty("photo", when="update")
    table = make_table({"photo": {"path": "pics/", "storage": storage}}, validator=validator)

    entity = table.new_entity({"photo": make_upload(error=UploadError.NO_FILE)})
    assert "photo" in entity

    entity = table.new_entity({"title": "x"})
    table.save(entity)
    table.patch_entity(entity, {"photo": make_upload(error=UploadError.NO_FILE)})
    assert "photo" not in entity


def test_columns_with_custom_names(make_table, engine, storage, make_upload):
    columns = make_columns("photo", dir="photo_dir", size="photo_size", type="photo_type")
    table = make_table(
        {
            "photo": {
                "path": "pics/{id}/",
                "storage": storage,
                "fields": {"dir": "photo_dir", "size": "photo_size", "type": "photo_type"},
            }
        },
        columns=columns,
    )
    entity = table.new_entity({"photo": make_upload()})
    table.save(entity)

    row = table.get(entity.id)
    assert row.photo_dir == f"pics/{entity.id}"
    assert row.photo_size == 5
    assert row.photo_type == "image/png"


def test_detach(make_table, storage, make_upload):
    table = make_table({"photo": {"path": "pics/", "storage": storage}})
    table.behaviors["UploadBehavior"].detach()
    entity = table.new_entity({"photo": make_upload()})

    table.save(entity)

    assert table.get(entity.id).photo is None