import logging
import re

from minidao.exceptions import MappingError
from minidao.filters import OPERATORS, UNARY_OPERATORS, CombinedFilter, NotFilter, Predicate
from minidao.resolver import NameResolver
from minidao.statement import BoundStatement

logger = logging.getLogger("minidao")

ALIAS = "t"

# dialects paginating with OFFSET ... FETCH NEXT instead of LIMIT
FETCH_DIALECTS = frozenset({"oracle", "sqlserver", "db2"})


class Reconciled:
    """Entity and criteria merged into one ordered field -> value view."""

    def __init__(self, mapper, values, criteria=None):
        self.mapper = mapper
        self.values = values
        self.criteria = criteria

    @property
    def pk_value(self):
        if self.mapper.pk is None:
            return None
        return self.values.get(self.mapper.pk)


class StatementBuilder:
    def __init__(self, resolver=None, dialect=None, quote_identifiers=False):
        self.resolver = resolver or NameResolver()
        self.dialect = dialect.lower() if dialect else None
        self.quote_identifiers = quote_identifiers
        self._safe_ident_pattern = re.compile(r'^[A-Za-z_][A-Za-z0-9_$]*$')

    def _quote(self, identifier):
        if not identifier or not self._safe_ident_pattern.match(str(identifier)):
            raise MappingError(f"Unsafe SQL identifier: {identifier}")
        if self.quote_identifiers:
            return f'"{identifier}"'
        return identifier

    def _qualified(self, column):
        return f"{ALIAS}.{self._quote(column)}"

    def _field(self, mapper, name):
        field = mapper.resolve_field(name)
        if field is None:
            raise MappingError(f"{mapper.cls.__name__} has no field or column '{name}'")
        return field

    def _column(self, mapper, name):
        field = mapper.resolve_field(name)
        return mapper.columns[field] if field else name

    def _require_pk(self, mapper):
        if mapper.pk is None:
            raise MappingError(f"Class {mapper.cls.__name__} has no primary key defined")
        return mapper.pk

    def reconcile(self, entity=None, criteria=None):
        """Merge an entity instance and a criteria; criteria values win."""
        if entity is None and criteria is None:
            raise MappingError("An entity or a criteria is required to build a statement")

        if entity is not None:
            cls = type(entity)
            if criteria is not None and criteria.entity_class not in (None, cls):
                raise MappingError(
                    f"Criteria is bound to {criteria.entity_class.__name__} "
                    f"but the entity is a {cls.__name__}"
                )
        else:
            cls = criteria.entity_class
            if cls is None:
                raise MappingError("Criteria has no entity class and no entity was given")

        mapper = self.resolver.describe(cls)
        values = mapper.values(entity) if entity is not None else {}

        if criteria is not None:
            for name, value in criteria.params.items():
                field = self._field(mapper, name)
                if value is None:
                    values.pop(field, None)
                else:
                    values[field] = value

            if criteria.pk_override is not None:
                name, value = criteria.pk_override
                field = self._field(mapper, name)
                if field != mapper.pk:
                    raise MappingError(
                        f"'{name}' is not the primary key of {cls.__name__} (pk={mapper.pk})"
                    )
                if value is not None and field in values:
                    values[field] = value
                elif value is not None:
                    values = {field: value, **values}

        return Reconciled(mapper, values, criteria)

    def build_insert(self, entity=None, criteria=None):
        return self.build_insert_for(self.reconcile(entity, criteria))

    def build_insert_for(self, rec):
        """Insert for an already reconciled input.

        A client-side key generated for the dialect is stored back into
        rec.values, so the caller can read it from rec.pk_value.
        """
        mapper = rec.mapper

        if mapper.pk and rec.pk_value is None:
            generated = self.resolver.primary_key_value(mapper.cls, self.dialect)
            if generated:
                rec.values = {mapper.pk: generated, **rec.values}

        values = rec.values
        if not values:
            raise MappingError(f"Nothing to insert for {mapper.cls.__name__}: no non-null values")

        columns = ", ".join(self._quote(mapper.columns[f]) for f in values)
        placeholders = ", ".join("?" for _ in values)
        sql = f"INSERT INTO {self._quote(mapper.table_name)} ({columns}) VALUES ({placeholders})"

        pk_column = None
        if mapper.pk and mapper.pk not in values:
            pk_column = mapper.pk_column
        logger.debug("Built insert: %s", sql)
        return BoundStatement(sql, tuple(values.values()), pk_column)

    def build_update(self, entity=None, criteria=None):
        rec = self.reconcile(entity, criteria)
        mapper = rec.mapper
        pk = self._require_pk(mapper)
        pk_value = rec.pk_value
        if pk_value is None:
            raise MappingError(
                f"Refusing to update {mapper.cls.__name__} without a primary key value"
            )

        assignments = [(f, v) for f, v in rec.values.items() if f != pk]
        if not assignments:
            raise MappingError(f"Nothing to update for {mapper.cls.__name__}: no non-null values")

        set_clause = ", ".join(f"{self._quote(mapper.columns[f])} = ?" for f, _ in assignments)
        sql = (
            f"UPDATE {self._quote(mapper.table_name)} SET {set_clause} "
            f"WHERE {self._quote(mapper.pk_column)} = ?"
        )
        params = [v for _, v in assignments]
        params.append(pk_value)
        logger.debug("Built update: %s", sql)
        return BoundStatement(sql, tuple(params))

    def build_delete(self, entity=None, criteria=None):
        rec = self.reconcile(entity, criteria)
        mapper = rec.mapper
        self._require_pk(mapper)
        if rec.pk_value is None:
            raise MappingError(
                f"Refusing to delete {mapper.cls.__name__} without a primary key value"
            )
        return self._delete_by_pk(mapper, rec.pk_value)

    def build_delete_by_id(self, cls, pk_value):
        mapper = self.resolver.describe(cls)
        self._require_pk(mapper)
        if pk_value is None:
            raise MappingError(f"Refusing to delete {cls.__name__} with a null id")
        return self._delete_by_pk(mapper, pk_value)

    def _delete_by_pk(self, mapper, pk_value):
        sql = (
            f"DELETE FROM {self._quote(mapper.table_name)} "
            f"WHERE {self._quote(mapper.pk_column)} = ?"
        )
        return BoundStatement(sql, (pk_value,))

    def build_truncate(self, cls):
        table = self._quote(self.resolver.table_name(cls))
        if self.dialect == "sqlite":
            return BoundStatement(f"DELETE FROM {table}")
        return BoundStatement(f"TRUNCATE TABLE {table}")

    def build_select(self, entity=None, criteria=None):
        rec = self.reconcile(entity, criteria)
        sql = f"SELECT {self._select_columns(rec.mapper)} FROM {self._from(rec.mapper)}"
        where, params = self._where(rec)
        sql += where
        if criteria is not None:
            sql += self._order_by(rec.mapper, criteria)
            sql += self._pagination(criteria)
        logger.debug("Built select: %s", sql)
        return BoundStatement(sql, tuple(params))

    def build_select_by_id(self, pk_value, entity=None, criteria=None):
        rec = self.reconcile(entity, criteria)
        mapper = rec.mapper
        self._require_pk(mapper)
        if pk_value is None:
            raise MappingError(f"Cannot select {mapper.cls.__name__} by a null id")

        where, params = self._where(rec, exclude_pk=True)
        pk_predicate = f"{self._qualified(mapper.pk_column)} = ?"
        where = f"{where} AND {pk_predicate}" if where else f" WHERE {pk_predicate}"
        params.append(pk_value)

        sql = f"SELECT {self._select_columns(mapper)} FROM {self._from(mapper)}{where}"
        return BoundStatement(sql, tuple(params))

    def build_count(self, entity=None, criteria=None):
        rec = self.reconcile(entity, criteria)
        where, params = self._where(rec)
        sql = f"SELECT COUNT(*) FROM {self._from(rec.mapper)}{where}"
        return BoundStatement(sql, tuple(params))

    def build_column_select(self, cls, field_name, pk_value):
        mapper = self.resolver.describe(cls)
        self._require_pk(mapper)
        column = self._qualified(self._column(mapper, self._field(mapper, field_name)))
        sql = (
            f"SELECT {column} FROM {self._from(mapper)} "
            f"WHERE {self._qualified(mapper.pk_column)} = ?"
        )
        return BoundStatement(sql, (pk_value,))

    def _from(self, mapper):
        return f"{self._quote(mapper.table_name)} {ALIAS}"

    def _select_columns(self, mapper):
        return ", ".join(self._qualified(mapper.columns[f]) for f in mapper.fields)

    def _where(self, rec, exclude_pk=False):
        parts = []
        params = []
        for field, value in rec.values.items():
            if exclude_pk and field == rec.mapper.pk:
                continue
            parts.append(f"{self._qualified(rec.mapper.columns[field])} = ?")
            params.append(value)

        if rec.criteria is not None:
            for expr in rec.criteria.predicates:
                sql, expr_params = self._render_filter(expr, rec.mapper)
                parts.append(sql)
                params.extend(expr_params)

        if not parts:
            return "", params
        return " WHERE " + " AND ".join(parts), params

    def _render_filter(self, expr, mapper):
        if isinstance(expr, Predicate):
            return self._render_predicate(expr, mapper)

        if isinstance(expr, NotFilter):
            sql, params = self._render_filter(expr.filter_expr, mapper)
            return f"NOT ({sql})", params

        if isinstance(expr, CombinedFilter):
            if not expr.filters:
                raise MappingError(f"Empty {expr.logic} filter")
            parts = []
            params = []
            for sub in expr.filters:
                sql, sub_params = self._render_filter(sub, mapper)
                parts.append(sql)
                params.extend(sub_params)
            return "(" + f" {expr.logic} ".join(parts) + ")", params

        raise MappingError(f"Unsupported filter expression: {expr!r}")

    def _render_predicate(self, pred, mapper):
        if not isinstance(pred.operator, str):
            raise MappingError(f"Unsupported operator: {pred.operator!r}")
        op = pred.operator.strip().upper()
        if op not in OPERATORS:
            raise MappingError(f"Unsupported operator: {op}")
        column = self._qualified(self._column(mapper, pred.column_name))

        if op in UNARY_OPERATORS:
            return f"{column} {op}", []

        value = pred.value
        if op in ('IN', 'NOT IN'):
            if isinstance(value, (list, tuple, set, frozenset)):
                values = list(value)
            else:
                values = [value]
            if not values:
                raise MappingError(f"Empty value list for {op} on {pred.column_name}")
            placeholders = ", ".join("?" for _ in values)
            return f"{column} {op} ({placeholders})", values

        if op == 'BETWEEN':
            if not isinstance(value, (list, tuple)) or len(value) != 2:
                raise MappingError(f"BETWEEN on {pred.column_name} needs exactly two bounds")
            return f"{column} BETWEEN ? AND ?", list(value)

        if value is None:
            if op == '=':
                return f"{column} IS NULL", []
            if op in ('!=', '<>'):
                return f"{column} IS NOT NULL", []
            raise MappingError(f"Operator {op} on {pred.column_name} needs a value")

        return f"{column} {op} ?", [value]

    def _order_by(self, mapper, criteria):
        if not criteria.orderings:
            return ""
        clauses = []
        for name, direction in criteria.orderings:
            if direction is None:
                direction = "ASC"
            if not isinstance(direction, str) or direction.strip().upper() not in ("ASC", "DESC"):
                raise MappingError(f"Invalid sort direction: {direction!r}")
            direction = direction.strip().upper()
            clauses.append(f"{self._qualified(self._column(mapper, name))} {direction}")
        return " ORDER BY " + ", ".join(clauses)

    def _pagination(self, criteria):
        limit = criteria.limit_value
        offset = criteria.offset_value
        if limit is None and offset is None:
            return ""
        try:
            limit = None if limit is None else int(limit)
            offset = None if offset is None else int(offset)
        except (TypeError, ValueError):
            raise MappingError(f"Invalid page: offset={offset!r} limit={limit!r}") from None
        if (limit is not None and limit < 0) or (offset is not None and offset < 0):
            raise MappingError(f"Invalid page: offset={offset} limit={limit}")

        if self.dialect in FETCH_DIALECTS:
            sql = f" OFFSET {offset or 0} ROWS"
            # sqlserver accepts OFFSET only after an ORDER BY
            if self.dialect == "sqlserver" and not criteria.orderings:
                sql = " ORDER BY (SELECT NULL)" + sql
            if limit is not None:
                sql += f" FETCH NEXT {limit} ROWS ONLY"
            return sql

        if limit is not None:
            sql = f" LIMIT {limit}"
            if offset is not None:
                sql += f" OFFSET {offset}"
            return sql
        if self.dialect == "sqlite":
            return f" LIMIT -1 OFFSET {offset}"
        return f" OFFSET {offset}"
