import logging
import uuid

from minidao.exceptions import MappingError
from minidao.mapper import Mapper
from minidao.naming import CamelCaseNaming

logger = logging.getLogger("minidao")

NATIVE_KEY_DIALECTS = frozenset({"mysql", "mariadb", "postgresql", "sqlite", "sqlserver", "h2", "hsqldb"})


def _random_key():
    return uuid.uuid4().hex


class NameResolver:
    """Maps entity classes to tables and fields to columns.

    Descriptors are computed once per class and kept for the lifetime of the
    resolver. The cache is a plain dict: two threads describing the same class
    at the same time both compute it and the first stored result wins.
    """

    def __init__(self, naming=None):
        self.naming = naming or CamelCaseNaming()
        self._mappers = {}
        self._columns = {}
        self._key_generators = {"oracle": _random_key, "db2": _random_key}

    def describe(self, cls):
        if not isinstance(cls, type):
            raise MappingError(f"Expected an entity class, got {cls!r}")
        mapper = self._mappers.get(cls)
        if mapper is not None:
            return mapper
        mapper = Mapper(cls, self.naming)
        logger.debug("Described %r", mapper)
        return self._mappers.setdefault(cls, mapper)

    def table_name(self, cls, override=None):
        if override:
            return override
        return self.describe(cls).table_name

    def column_name(self, field_name, cls=None):
        if cls is None:
            return self.naming.to_column(field_name)
        key = (cls, field_name)
        column = self._columns.get(key)
        if column is None:
            column = self._columns.setdefault(key, self.describe(cls).column(field_name))
        return column

    def field_name(self, column_name, cls=None):
        if cls is not None:
            field = self.describe(cls).field_for_column(column_name)
            if field is not None:
                return field
        return self.naming.to_field(column_name)

    def primary_key_name(self, cls, required=True):
        """Column name of the primary key, or None when not required and absent."""
        mapper = self.describe(cls)
        if mapper.pk is None and required:
            raise MappingError(f"Class {cls.__name__} has no primary key defined")
        return mapper.pk_column

    def primary_key_value(self, cls, dialect):
        """Pre-generate a key for dialects without native auto-increment.

        Returns "" when the database generates the key itself.
        """
        generator = self._key_generators.get((dialect or "").lower())
        if generator is None:
            if dialect and dialect.lower() not in NATIVE_KEY_DIALECTS:
                logger.debug("Unknown dialect %s, assuming native key generation", dialect)
            return ""
        self.primary_key_name(cls)
        return str(generator())

    def register_key_generator(self, dialect, generator):
        self._key_generators[dialect.lower()] = generator
