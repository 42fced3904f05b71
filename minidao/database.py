import sqlite3
import logging

from minidao.exceptions import ExecutionError


class DatabaseEngine:
    """sqlite3-backed execution layer used by Session.

    Any object offering the same execute/update/update_returning_key/query/
    query_scalar methods can stand in for it.
    """

    logger = logging.getLogger("minidao")
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO)

    def __init__(self, db_path=":memory:", log_sql=True):
        self.connection = sqlite3.connect(db_path)
        self.connection.row_factory = sqlite3.Row
        self.log_sql = log_sql

    @classmethod
    def from_settings(cls, settings):
        return cls(settings.database, log_sql=settings.log_sql)

    def _log(self, sql, params=None):
        if not self.log_sql:
            return
        msg = f"[SQL EXECUTE]: {sql}"
        if params:
            msg += f" | [PARAMS]: {params}"
        self.logger.info(msg)

    def _run(self, sql, params=None):
        self._log(sql, params)
        try:
            cursor = self.connection.cursor()
            cursor.execute(sql, tuple(params or ()))
        except sqlite3.Error as e:
            raise ExecutionError(str(e), sql, params) from e
        return cursor

    def execute(self, sql):
        self._run(sql)

    def update(self, sql, params=None):
        return self._run(sql, params).rowcount

    def update_returning_key(self, sql, params, pk_column):
        # sqlite hands back the rowid, which is the INTEGER PRIMARY KEY column
        return self._run(sql, params).lastrowid

    def query(self, sql, params, mapper):
        rows = self._run(sql, params).fetchall()
        return [mapper(dict(row)) for row in rows]

    def query_scalar(self, sql, params=None):
        row = self._run(sql, params).fetchone()
        if row is None or row[0] is None:
            return 0
        return int(row[0])

    def commit(self):
        self.connection.commit()

    def rollback(self):
        self.connection.rollback()

    def close(self):
        self.connection.close()
