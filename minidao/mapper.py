import dataclasses
import inspect
import typing

from pydantic import BaseModel

from minidao.exceptions import MappingError
from minidao.orm_types import Column


def _meta_attrs(cls):
    meta_cls = getattr(cls, "Meta", None)
    meta_attrs = {}
    if meta_cls:
        for attr in dir(meta_cls):
            if not attr.startswith('_'):
                meta_attrs[attr] = getattr(meta_cls, attr)
    return meta_attrs


def _is_classvar(hint):
    if isinstance(hint, str):
        return hint.startswith(("ClassVar", "typing.ClassVar"))
    return hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar


class Mapper:
    """Per-class descriptor: table name, persistable fields, columns and pk.

    Built once per class by NameResolver.describe() and never mutated after.
    """

    def __init__(self, cls, naming):
        self.cls = cls
        self.naming = naming
        self.meta = _meta_attrs(cls)
        self.kind = None
        self.table_name = None
        self.fields = []
        self.columns = {}
        self.pk = None

        self._resolve_table_name()
        self._resolve_columns()
        self._resolve_pk()
        self._fields_by_column = {col: name for name, col in self.columns.items()}

    def __repr__(self):
        cols = ", ".join(self.columns.values())
        return (
            f"<Mapper class={self.cls.__name__} table={self.table_name} "
            f"columns=[{cols}] pk={self.pk or 'None'}>"
        )

    def _resolve_table_name(self):
        self.table_name = self.meta.get("table_name") or self.naming.to_column(self.cls.__name__)

    def _resolve_columns(self):
        self._marked_pks = []
        for name, column_name, is_pk in self._declared_fields():
            if name in self.columns:
                continue
            self.fields.append(name)
            self.columns[name] = column_name or self.naming.to_column(name)
            if is_pk:
                self._marked_pks.append(name)

        if not self.fields:
            raise MappingError(f"Class {self.cls.__name__} exposes no persistable fields")

    def _resolve_pk(self):
        if len(self._marked_pks) > 1:
            raise MappingError(
                f"Class {self.cls.__name__} marks more than one primary key: {self._marked_pks}"
            )
        if self._marked_pks:
            self.pk = self._marked_pks[0]
        elif "pk" in self.meta:
            if self.meta["pk"] not in self.columns:
                raise MappingError(
                    f"Meta.pk '{self.meta['pk']}' is not a field of {self.cls.__name__}"
                )
            self.pk = self.meta["pk"]
        elif "id" in self.columns:
            self.pk = "id"

    def _declared_fields(self):
        cls = self.cls

        if dataclasses.is_dataclass(cls):
            self.kind = "dataclass"
            for f in dataclasses.fields(cls):
                if f.metadata.get("transient"):
                    continue
                yield f.name, f.metadata.get("column"), f.metadata.get("pk", False)
            return

        if issubclass(cls, BaseModel):
            self.kind = "model"
            for name, info in cls.model_fields.items():
                extra = info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {}
                if extra.get("transient"):
                    continue
                yield name, extra.get("column"), extra.get("pk", False)
            return

        declared = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, Column):
                    declared[name] = value
        if declared:
            self.kind = "columns"
            for name, col in declared.items():
                yield name, col.name, col.pk
            return

        self.kind = "annotations"
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            for name, hint in inspect.get_annotations(klass).items():
                if name.startswith('_') or _is_classvar(hint):
                    continue
                yield name, None, False

    @property
    def pk_column(self):
        return self.columns[self.pk] if self.pk else None

    def column(self, field_name):
        try:
            return self.columns[field_name]
        except KeyError:
            raise MappingError(f"{self.cls.__name__} has no field '{field_name}'") from None

    def field_for_column(self, column_name):
        return self._fields_by_column.get(column_name)

    def resolve_field(self, name):
        """Accept either a field name or a column name, return the field name."""
        if name in self.columns:
            return name
        return self._fields_by_column.get(name)

    def values(self, entity):
        """Non-null field values of an instance, in declaration order."""
        data = {}
        for name in self.fields:
            value = getattr(entity, name, None)
            if isinstance(value, Column):
                value = None
            if value is not None:
                data[name] = value
        return data

    def hydrate(self, data):
        """Build an instance from a field -> value dict.

        Fields missing from data are left at None (or their declared default).
        """
        cls = self.cls

        if self.kind == "dataclass":
            kwargs = {}
            late = {}
            for f in dataclasses.fields(cls):
                if f.name in data:
                    if f.init:
                        kwargs[f.name] = data[f.name]
                    else:
                        late[f.name] = data[f.name]
                elif f.init and f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                    kwargs[f.name] = None
            obj = cls(**kwargs)
            for name, value in late.items():
                object.__setattr__(obj, name, value)
            return obj

        if self.kind == "model":
            return cls.model_construct(**{name: data.get(name) for name in self.fields})

        obj = cls.__new__(cls)
        for name in self.fields:
            if name in data:
                setattr(obj, name, data[name])
            elif self.kind == "annotations":
                setattr(obj, name, None)
        return obj
