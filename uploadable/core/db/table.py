from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import cached_property
from typing import TYPE_CHECKING, Any

import sqlalchemy
from loguru import logger
from sqlalchemy.types import TypeEngine

from uploadable.core.db.entity import Entity
from uploadable.core.db.schema import TableSchema
from uploadable.core.db.validation import Validator
from uploadable.core.signals import Broadcaster, send_vetoable
from uploadable.exceptions import RecordNotFound, RecordNotSaved

if TYPE_CHECKING:
    from uploadable.core.db.behaviors import Behavior


class Table:
    """
    A synchronous record store for one database table.

    Every write goes through the lifecycle signals of `signals`:

    * `before_marshal(table, data=..., new_record=...)` before incoming data
      becomes a record, `data` is a mutable dict.
    * `before_save(table, entity=..., options=...)` before a record is written.
      Returning `False` vetoes the save.
    * `after_save(table, entity=..., created=..., options=...)` after a record
      was written.
      The record is already clean at that point, so anything a receiver sets is
      dirty again. Returning `False` marks the save as failed.

      `options` is the same dict in both save signals, receivers may use it to
      hand state from one phase to the other.
    * `after_delete(table, entity=...)` after a row was deleted. Returning
      `False` marks the delete as failed.

    `update_all` bypasses the signals entirely.
    """

    def __init__(
        self,
        name: str,
        engine: sqlalchemy.Engine,
        columns: Sequence[sqlalchemy.Column],
        *,
        primary_key: str = "id",
        types: Mapping[str, type[TypeEngine]] | None = None,
        validator: Validator | None = None,
        metadata: sqlalchemy.MetaData | None = None,
    ) -> None:
        self.name = name
        self.engine = engine
        self.primary_key = primary_key
        self.schema = TableSchema(columns, types)
        self.validator = validator if validator is not None else Validator()
        self.metadata = metadata if metadata is not None else sqlalchemy.MetaData()
        self.signals = Broadcaster()
        self.behaviors: dict[str, Behavior] = {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__}: {self.name}>"

    @cached_property
    def table(self) -> sqlalchemy.Table:
        """
        The SQLAlchemy table, built from the schema on first access. Behaviors
        changing column types must be attached before.
        """
        return self.schema.build(self.name, self.metadata)

    def add_behavior(
        self, behavior_class: type[Behavior], config: Any = None, name: str | None = None
    ) -> Behavior:
        behavior = behavior_class(self, config)
        self.behaviors[name or behavior_class.__name__] = behavior
        return behavior

    def create_all(self) -> None:
        self.metadata.create_all(self.engine, tables=[self.table])

    def drop_all(self) -> None:
        self.metadata.drop_all(self.engine, tables=[self.table])

    def new_entity(self, data: Mapping[str, Any] | None = None) -> Entity:
        data = dict(data or {})
        self.signals.before_marshal.send(self, data=data, new_record=True)
        return Entity(data, new=True)

    def patch_entity(self, entity: Entity, data: Mapping[str, Any]) -> Entity:
        data = dict(data)
        self.signals.before_marshal.send(self, data=data, new_record=entity.is_new)
        for key, value in data.items():
            entity.set(key, value)
        return entity

    def get(self, pk: Any) -> Entity:
        """
        Loads the record with the primary key `pk`.

        Raises:
            RecordNotFound: If no such record exists.
        """
        expression = sqlalchemy.select(self.table).where(self.table.c[self.primary_key] == pk)
        with self.engine.connect() as connection:
            row = connection.execute(expression).first()
        if row is None:
            raise RecordNotFound(f"No record with {self.primary_key}={pk!r} in '{self.name}'.")
        return Entity(dict(row._mapping), new=False)

    def save(self, entity: Entity, options: Mapping[str, Any] | None = None) -> Entity | bool:
        """
        Inserts a new or updates an existing record.

        Returns the record, or `False` when a `before_save` or `after_save`
        receiver vetoed.
        """
        options = dict(options or {})
        if not send_vetoable(self.signals.before_save, self, entity=entity, options=options):
            logger.debug(f"Saving a record of '{self.name}' was vetoed before writing it.")
            return False

        created = entity.is_new
        values = entity.extract(self.schema.columns(), only_dirty=not created)
        with self.engine.begin() as connection:
            if created:
                if values.get(self.primary_key) is None:
                    values.pop(self.primary_key, None)
                result = connection.execute(self.table.insert().values(**values))
                if entity.get(self.primary_key) is None:
                    entity.set(self.primary_key, result.inserted_primary_key[0])
            elif values:
                connection.execute(
                    self.table.update()
                    .values(**values)
                    .where(self.table.c[self.primary_key] == entity.get(self.primary_key))
                )
        entity.clean()
        entity.is_new = False

        if not send_vetoable(
            self.signals.after_save, self, entity=entity, created=created, options=options
        ):
            logger.debug(f"Saving a record of '{self.name}' failed after writing it.")
            return False
        return entity

    def save_or_fail(self, entity: Entity, options: Mapping[str, Any] | None = None) -> Entity:
        """
        Like `save` but raises `RecordNotSaved` instead of returning `False`.
        """
        result = self.save(entity, options)
        if result is False:
            raise RecordNotSaved(detail=f"Record of '{self.name}' could not be saved.")
        return entity

    def delete(self, entity: Entity) -> bool:
        """
        Deletes the row of `entity` and notifies `after_delete`.

        Returns `False` if no row was deleted or a receiver vetoed.
        """
        pk = entity.get(self.primary_key)
        if pk is None:
            return False
        with self.engine.begin() as connection:
            result = connection.execute(
                self.table.delete().where(self.table.c[self.primary_key] == pk)
            )
        if not result.rowcount:
            return False
        return send_vetoable(self.signals.after_delete, self, entity=entity)

    def update_all(self, values: Mapping[str, Any], conditions: Mapping[str, Any]) -> int:
        """
        Updates all rows matching `conditions` without dispatching any signal.

        Returns the number of updated rows.
        """
        clauses = [self.table.c[column] == value for column, value in conditions.items()]
        with self.engine.begin() as connection:
            result = connection.execute(self.table.update().values(**values).where(*clauses))
        return result.rowcount
