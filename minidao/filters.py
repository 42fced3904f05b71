"""
Filter expressions for Criteria, similar to SQLAlchemy.

    criteria.where(col('age') > 5)
    criteria.where(col('userName').like('a%') | col('age').in_([3, 5, 7]))
    criteria.where(~col('age').between(3, 7))
"""

OPERATORS = frozenset({
    '=', '!=', '<>', '<', '<=', '>', '>=',
    'LIKE', 'NOT LIKE', 'IN', 'NOT IN',
    'IS NULL', 'IS NOT NULL', 'BETWEEN',
})

# operators that take no value
UNARY_OPERATORS = frozenset({'IS NULL', 'IS NOT NULL'})


class FilterExpression:
    """Base class for all filter expressions"""

    def __and__(self, other):
        return CombinedFilter(self, other, logic='AND')

    def __or__(self, other):
        return CombinedFilter(self, other, logic='OR')

    def __invert__(self):
        """Negate a filter using the ~ operator"""
        return NotFilter(self)


class Predicate(FilterExpression):
    """column <operator> value"""

    def __init__(self, column_name, operator, value=None):
        self.column_name = column_name
        self.operator = operator
        self.value = value

    def __repr__(self):
        return f"<Predicate {self.column_name} {self.operator} {self.value!r}>"


class NotFilter(FilterExpression):
    def __init__(self, filter_expr):
        self.filter_expr = filter_expr

    def __repr__(self):
        return f"<NotFilter {self.filter_expr!r}>"


class CombinedFilter(FilterExpression):
    """Combines multiple filters with AND or OR logic"""

    def __init__(self, *filters, logic='AND'):
        self.filters = filters
        self.logic = logic.upper()
        if self.logic not in ('AND', 'OR'):
            raise ValueError("Logic must be 'AND' or 'OR'")

    def __and__(self, other):
        if self.logic == 'AND':
            if isinstance(other, CombinedFilter) and other.logic == 'AND':
                return CombinedFilter(*self.filters, *other.filters, logic='AND')
            return CombinedFilter(*self.filters, other, logic='AND')
        return CombinedFilter(self, other, logic='AND')

    def __or__(self, other):
        if self.logic == 'OR':
            if isinstance(other, CombinedFilter) and other.logic == 'OR':
                return CombinedFilter(*self.filters, *other.filters, logic='OR')
            return CombinedFilter(*self.filters, other, logic='OR')
        return CombinedFilter(self, other, logic='OR')

    def __repr__(self):
        return f"<CombinedFilter {self.logic} {list(self.filters)!r}>"


class ColumnFilter:
    """A column handle used to start building filter expressions"""

    def __init__(self, column_name):
        self.column_name = column_name

    def _predicate(self, operator, value=None):
        return Predicate(self.column_name, operator, value)

    def __eq__(self, other):
        return self._predicate('=', other)

    def __ne__(self, other):
        return self._predicate('!=', other)

    def __lt__(self, other):
        return self._predicate('<', other)

    def __le__(self, other):
        return self._predicate('<=', other)

    def __gt__(self, other):
        return self._predicate('>', other)

    def __ge__(self, other):
        return self._predicate('>=', other)

    __hash__ = None

    def in_(self, values):
        return self._predicate('IN', list(values))

    def not_in(self, values):
        return self._predicate('NOT IN', list(values))

    def like(self, pattern):
        return self._predicate('LIKE', pattern)

    def not_like(self, pattern):
        return self._predicate('NOT LIKE', pattern)

    def is_null(self):
        return self._predicate('IS NULL')

    def is_not_null(self):
        return self._predicate('IS NOT NULL')

    def between(self, lower, upper):
        return self._predicate('BETWEEN', (lower, upper))


def col(column_name):
    """Create a ColumnFilter to start building filter expressions"""
    return ColumnFilter(column_name)


def and_(*filters):
    return CombinedFilter(*filters, logic='AND')


def or_(*filters):
    return CombinedFilter(*filters, logic='OR')
