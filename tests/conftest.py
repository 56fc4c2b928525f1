import itertools
import os

import pytest
import sqlalchemy

os.environ.setdefault("UPLOADABLE_SETTINGS_MODULE", "tests.settings.TestSettings")

from uploadable import Table, UploadBehavior, UploadError  # noqa: E402
from uploadable.core.files.storage.filesystem import FileSystemStorage  # noqa: E402


def make_columns(*fields: str, dir: str = "dir", size: str = "size", type: str = "type"):
    columns = [
        sqlalchemy.Column("id", sqlalchemy.Integer, primary_key=True, autoincrement=True),
        sqlalchemy.Column("title", sqlalchemy.String(100), nullable=True),
    ]
    columns.extend(sqlalchemy.Column(field, sqlalchemy.String(255), nullable=True) for field in fields)
    columns.extend(
        [
            sqlalchemy.Column(dir, sqlalchemy.String(255), nullable=True),
            sqlalchemy.Column(size, sqlalchemy.Integer, nullable=True),
            sqlalchemy.Column(type, sqlalchemy.String(100), nullable=True),
        ]
    )
    return columns


@pytest.fixture()
def engine(tmp_path):
    engine = sqlalchemy.create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    yield engine
    engine.dispose()


@pytest.fixture()
def storage(tmp_path):
    return FileSystemStorage(location=tmp_path / "media")


@pytest.fixture()
def make_table(engine):
    def factory(config=None, *, fields=("photo",), name="articles", columns=None, validator=None):
        table = Table(name, engine, columns or make_columns(*fields), validator=validator)
        if config is not None:
            table.add_behavior(UploadBehavior, config)
        table.create_all()
        return table

    return factory


@pytest.fixture()
def make_upload(tmp_path):
    directory = tmp_path / "tmp"
    directory.mkdir()
    counter = itertools.count()

    def factory(name="me.png", content=b"image", type="image/png", error=UploadError.OK):
        path = directory / f"upload{next(counter)}"
        path.write_bytes(content)
        return {
            "tmp_name": str(path),
            "name": name,
            "size": len(content),
            "type": type,
            "error": int(error),
        }

    return factory
