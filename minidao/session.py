import logging

from minidao.builder import StatementBuilder
from minidao.criteria import Criteria
from minidao.exceptions import MappingError
from minidao.naming import get_naming
from minidao.registry import NamedStatementRegistry
from minidao.resolver import NameResolver
from minidao.row_mapper import DictRowMapper, default_row_mapper_factory

logger = logging.getLogger("minidao")


class Session:
    """Entity-level data access on top of an execution engine.

    Every statement is fully built (and validated) before the engine sees it.
    The session never commits or rolls back; transactions belong to the caller.
    """

    def __init__(self, engine, resolver=None, dialect=None, registry=None,
                 row_mapper_factory=None, quote_identifiers=False):
        self.engine = engine
        self.resolver = resolver or NameResolver()
        self.dialect = dialect
        self.builder = StatementBuilder(self.resolver, dialect, quote_identifiers)
        self.registry = registry if registry is not None else NamedStatementRegistry()
        self.row_mapper_factory = row_mapper_factory or default_row_mapper_factory

    @classmethod
    def from_settings(cls, engine, settings, **kwargs):
        return cls(
            engine,
            resolver=NameResolver(get_naming(settings.naming)),
            dialect=settings.dialect,
            quote_identifiers=settings.quote_identifiers,
            **kwargs,
        )

    def _split(self, target, criteria=None):
        """Normalize (instance | class | Criteria, criteria) into (entity, criteria)."""
        if isinstance(target, Criteria):
            if criteria is not None:
                raise MappingError("Pass a single Criteria, not two")
            return None, target
        if isinstance(target, type):
            if criteria is None:
                return None, Criteria.create(target)
            if criteria.entity_class is None:
                criteria.for_class(target)
            elif criteria.entity_class is not target:
                raise MappingError(
                    f"Criteria is bound to {criteria.entity_class.__name__}, not {target.__name__}"
                )
            return None, criteria
        return target, criteria

    def _row_mapper(self, entity, criteria):
        cls = type(entity) if entity is not None else criteria.entity_class
        return self.row_mapper_factory(cls, self.resolver)

    def insert(self, target, criteria=None):
        """Insert and return the key: generated by the database or pre-generated for the dialect."""
        entity, criteria = self._split(target, criteria)
        rec = self.builder.reconcile(entity, criteria)
        stmt = self.builder.build_insert_for(rec)

        if stmt.pk_column:
            key = self.engine.update_returning_key(stmt.sql, stmt.params, stmt.pk_column)
        else:
            self.engine.update(stmt.sql, stmt.params)
            key = rec.pk_value

        pk = rec.mapper.pk
        if entity is not None and pk and key is not None and getattr(entity, pk, None) is None:
            # the row is written; an immutable entity only misses the back-fill
            try:
                setattr(entity, pk, key)
            except (AttributeError, TypeError, ValueError) as exc:
                logger.debug("Key %r not written back to %s: %s",
                             key, type(entity).__name__, exc)
        return key

    def save(self, target, criteria=None):
        """Insert without retrieving a generated key."""
        entity, criteria = self._split(target, criteria)
        rec = self.builder.reconcile(entity, criteria)
        stmt = self.builder.build_insert_for(rec)
        return self.engine.update(stmt.sql, stmt.params)

    def update(self, target, criteria=None):
        entity, criteria = self._split(target, criteria)
        stmt = self.builder.build_update(entity, criteria)
        return self.engine.update(stmt.sql, stmt.params)

    def delete(self, target, criteria=None):
        entity, criteria = self._split(target, criteria)
        stmt = self.builder.build_delete(entity, criteria)
        return self.engine.update(stmt.sql, stmt.params)

    def delete_by_id(self, cls, pk_value):
        stmt = self.builder.build_delete_by_id(cls, pk_value)
        return self.engine.update(stmt.sql, stmt.params)

    def delete_all(self, cls):
        stmt = self.builder.build_truncate(cls)
        self.engine.execute(stmt.sql)

    def query_list(self, target, criteria=None):
        entity, criteria = self._split(target, criteria)
        stmt = self.builder.build_select(entity, criteria)
        return self.engine.query(stmt.sql, stmt.params, self._row_mapper(entity, criteria))

    def query_count(self, target, criteria=None):
        entity, criteria = self._split(target, criteria)
        stmt = self.builder.build_count(entity, criteria)
        return self.engine.query_scalar(stmt.sql, stmt.params)

    def get(self, target, pk_value):
        """Fetch by primary key. No matching row gives None, not an error."""
        entity, criteria = self._split(target)
        stmt = self.builder.build_select_by_id(pk_value, entity, criteria)
        rows = self.engine.query(stmt.sql, stmt.params, self._row_mapper(entity, criteria))
        return rows[0] if rows else None

    def query_single_result(self, target, criteria=None):
        entity, criteria = self._split(target, criteria)
        stmt = self.builder.build_select(entity, criteria)
        rows = self.engine.query(stmt.sql, stmt.params, self._row_mapper(entity, criteria))
        if len(rows) > 1:
            logger.debug("query_single_result matched %d rows, returning the first", len(rows))
        return rows[0] if rows else None

    def query_for_sql(self, sql_id, params=None):
        stmt = self.registry.lookup(sql_id, params)
        return self.engine.query(stmt.sql, stmt.params, DictRowMapper())

    def update_for_sql(self, sql_id, params=None):
        stmt = self.registry.lookup(sql_id, params)
        return self.engine.update(stmt.sql, stmt.params)

    def get_column_value(self, cls, field_name, pk_value):
        stmt = self.builder.build_column_select(cls, field_name, pk_value)
        values = self.engine.query(stmt.sql, stmt.params, lambda row: next(iter(row.values())))
        return values[0] if values else None
