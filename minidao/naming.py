"""
Naming conventions used to turn class and field names into table and column
names, and back again when rows are mapped onto objects.
"""

import re
from abc import ABC, abstractmethod

_FIRST_CAP = re.compile(r'(.)([A-Z][a-z]+)')
_ALL_CAP = re.compile(r'([a-z0-9])([A-Z])')


def camel_to_snake(name):
    """userName -> user_name, HTTPServer -> http_server"""
    s1 = _FIRST_CAP.sub(r'\1_\2', name)
    return _ALL_CAP.sub(r'\1_\2', s1).lower()


def snake_to_camel(name):
    """user_name -> userName"""
    head, *rest = name.lower().split('_')
    return head + "".join(part.capitalize() for part in rest)


class NamingStrategy(ABC):
    @abstractmethod
    def to_column(self, name):
        """Convert a class or field name to its database form."""
        pass

    @abstractmethod
    def to_field(self, column_name):
        """Inverse of to_column, used when mapping rows."""
        pass


class CamelCaseNaming(NamingStrategy):
    def to_column(self, name):
        return camel_to_snake(name)

    def to_field(self, column_name):
        return snake_to_camel(column_name)


class IdentityNaming(NamingStrategy):
    def to_column(self, name):
        return name

    def to_field(self, column_name):
        return column_name


STRATEGIES = {
    "camel": CamelCaseNaming,
    "identity": IdentityNaming,
}


def get_naming(name):
    if name not in STRATEGIES:
        raise ValueError(f"Unknown naming strategy: {name}")
    return STRATEGIES[name]()
