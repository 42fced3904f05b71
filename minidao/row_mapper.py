from abc import ABC, abstractmethod


class RowMapper(ABC):
    """Turns one result row (a column -> value mapping) into one object."""

    @abstractmethod
    def map_row(self, row):
        pass

    def __call__(self, row):
        return self.map_row(row)


class EntityRowMapper(RowMapper):
    """Default policy: columns are matched to fields by inverse name lookup.

    Columns with no matching field are ignored, fields with no column stay None.
    """

    def __init__(self, cls, resolver):
        self.cls = cls
        self.resolver = resolver
        self.mapper = resolver.describe(cls)

    def map_row(self, row):
        data = {}
        for column_name, value in row.items():
            field = self.mapper.field_for_column(column_name)
            if field is None:
                field = self.mapper.resolve_field(self.resolver.field_name(column_name))
            if field is not None:
                data[field] = value
        return self.mapper.hydrate(data)


class DictRowMapper(RowMapper):
    def map_row(self, row):
        return dict(row)


def default_row_mapper_factory(cls, resolver):
    return EntityRowMapper(cls, resolver)
