import re

from minidao.exceptions import MappingError, NotFoundError
from minidao.statement import BoundStatement

# quoted literals, comments and '::' casts are matched first so their
# contents are never mistaken for placeholders
_PLACEHOLDER = re.compile(
    r"""'(?:[^']|'')*'|"(?:[^"]|"")*"|--[^\n]*|/\*.*?\*/|::|:([A-Za-z_][A-Za-z0-9_]*)""",
    re.DOTALL,
)


class NamedStatementRegistry:
    """Hand-written SQL addressed by identifier, parameterized by :name."""

    def __init__(self, statements=None):
        self._statements = {}
        if statements:
            self.register_all(statements)

    def __contains__(self, identifier):
        return identifier in self._statements

    def __len__(self):
        return len(self._statements)

    def register(self, identifier, template):
        if not identifier:
            raise ValueError("Statement identifier cannot be empty")
        self._statements[identifier] = template
        return self

    def register_all(self, statements):
        for identifier, template in statements.items():
            self.register(identifier, template)
        return self

    def lookup(self, identifier, named_params=None):
        try:
            template = self._statements[identifier]
        except KeyError:
            raise NotFoundError(f"No statement registered as '{identifier}'") from None

        named_params = named_params or {}
        params = []

        def substitute(match):
            name = match.group(1)
            if name is None:
                return match.group(0)
            if name not in named_params:
                raise MappingError(
                    f"Statement '{identifier}' needs parameter '{name}'",
                    {"identifier": identifier, "missing": name},
                )
            value = named_params[name]
            if isinstance(value, (list, tuple, set, frozenset)):
                values = list(value)
                if not values:
                    raise MappingError(f"Parameter '{name}' of '{identifier}' is an empty list")
                params.extend(values)
                return ", ".join("?" for _ in values)
            params.append(value)
            return "?"

        sql = _PLACEHOLDER.sub(substitute, template)
        return BoundStatement(sql, tuple(params))
