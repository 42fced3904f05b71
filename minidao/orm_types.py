class Column:
    """Declares a persistable attribute on an entity class.

    Works as a descriptor: reading the attribute on an instance returns the
    stored value (or the default), reading it on the class returns the Column.
    """

    def __init__(self, dtype=None, pk=False, name=None, default=None):
        self.dtype = dtype
        self.pk = pk
        self.name = name
        self.default = default
        self.attr = None

    def __set_name__(self, owner, attr):
        self.attr = attr

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        return instance.__dict__.get(self.attr, self.default)

    def __set__(self, instance, value):
        instance.__dict__[self.attr] = value

    def __repr__(self):
        parts = [self.attr or "?"]
        if self.name:
            parts.append(f"name={self.name}")
        if self.pk:
            parts.append("pk")
        return f"<{self.__class__.__name__} {', '.join(parts)}>"


class Text(Column):
    def __init__(self, pk=False, name=None, default=None):
        super().__init__(str, pk, name, default)


class Number(Column):
    def __init__(self, pk=False, name=None, default=None):
        super().__init__(int, pk, name, default)


class Blob(Column):
    def __init__(self, name=None, default=None):
        super().__init__(bytes, False, name, default)
