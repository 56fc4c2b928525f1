from __future__ import annotations

from collections.abc import Mapping, Sequence

import sqlalchemy
from sqlalchemy.types import TypeEngine

from uploadable.exceptions import ImproperlyConfigured, UnknownColumnTypeError


class TableSchema:
    """
    The columns of a table plus the logical types some of them carry.

    Logical types are plain names (e.g. `"upload.file"`) resolved against the
    `types` mapping owned by this schema. A column with a logical type gets the
    mapped SQLAlchemy type when the table is built.
    """

    def __init__(
        self,
        columns: Sequence[sqlalchemy.Column],
        types: Mapping[str, type[TypeEngine]] | None = None,
    ) -> None:
        self._columns: dict[str, sqlalchemy.Column] = {column.name: column for column in columns}
        self.types: dict[str, type[TypeEngine]] = dict(types or {})
        self._logical_types: dict[str, str] = {}
        self.built = False

    def columns(self) -> list[str]:
        return list(self._columns)

    def has_column(self, name: str) -> bool:
        return name in self._columns

    def map_type(self, name: str, type_: type[TypeEngine], overwrite: bool = False) -> None:
        """
        Makes the logical type `name` available to the columns of this schema.
        """
        if overwrite or name not in self.types:
            self.types[name] = type_

    def column_type(self, column: str, logical_type: str | None = None) -> str | None:
        """
        Returns the logical type of `column`, setting it first when
        `logical_type` is given.

        Raises:
            ImproperlyConfigured: If the column is unknown or the table was
                already built.
            UnknownColumnTypeError: If the logical type is not mapped.
        """
        if logical_type is None:
            return self._logical_types.get(column)
        if column not in self._columns:
            raise ImproperlyConfigured(f"Column '{column}' does not exist.")
        if logical_type not in self.types:
            raise UnknownColumnTypeError(f"Unknown column type '{logical_type}'.")
        if self.built:
            raise ImproperlyConfigured(
                f"Cannot change the type of '{column}', the table was already built."
            )
        self._logical_types[column] = logical_type
        return logical_type

    def build(self, name: str, metadata: sqlalchemy.MetaData) -> sqlalchemy.Table:
        columns = []
        for column_name, column in self._columns.items():
            column = column._copy()
            logical_type = self._logical_types.get(column_name)
            if logical_type is not None:
                column.type = self.types[logical_type]()
            columns.append(column)
        self.built = True
        return sqlalchemy.Table(name, metadata, *columns)
