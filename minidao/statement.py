from typing import NamedTuple, Optional


class BoundStatement(NamedTuple):
    """SQL text with its positional parameters, in placeholder order.

    pk_column is only set for inserts that leave the key to the database.
    """

    sql: str
    params: tuple = ()
    pk_column: Optional[str] = None

    def __str__(self):
        return self.sql
