from minidao.filters import FilterExpression, Predicate


class Criteria:
    """Mutable query descriptor: named values, predicates, ordering, paging.

    Every mutator returns the criteria so calls can be chained:

        Criteria.create(User).param("userName", "alice").desc("age").page(0, 10)
    """

    def __init__(self, entity_class=None):
        self.entity_class = entity_class
        self.params = {}
        self.predicates = []
        self.orderings = []
        self.offset_value = None
        self.limit_value = None
        self.pk_override = None

    @classmethod
    def create(cls, entity_class):
        return cls(entity_class)

    def __repr__(self):
        name = getattr(self.entity_class, "__name__", None)
        return (
            f"<Criteria class={name} params={self.params} predicates={self.predicates} "
            f"order={self.orderings} offset={self.offset_value} limit={self.limit_value}>"
        )

    def for_class(self, entity_class):
        self.entity_class = entity_class
        return self

    def param(self, name, value):
        """Add or override a named value. None keeps the field out of the statement."""
        self.params[name] = value
        return self

    def predicate(self, column, operator, value=None):
        self.predicates.append(Predicate(column, operator, value))
        return self

    def where(self, *expressions):
        for expr in expressions:
            if not isinstance(expr, FilterExpression):
                raise TypeError(f"Not a filter expression: {expr!r}")
            self.predicates.append(expr)
        return self

    def order_by(self, column, direction="ASC"):
        self.orderings.append((column, direction))
        return self

    def asc(self, column):
        return self.order_by(column, "ASC")

    def desc(self, column):
        return self.order_by(column, "DESC")

    def page(self, offset, limit):
        self.offset_value = offset
        self.limit_value = limit
        return self

    def limit(self, value):
        self.limit_value = value
        return self

    def offset(self, value):
        self.offset_value = value
        return self

    def set_primary_key_override(self, name, value):
        self.pk_override = (name, value)
        return self
