from .behaviors import Behavior
from .entity import Entity
from .schema import TableSchema
from .table import Table
from .validation import Validator

__all__ = ["Behavior", "Entity", "Table", "TableSchema", "Validator"]
