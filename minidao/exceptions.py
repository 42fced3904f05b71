class MiniDaoError(Exception):
    """Base class for every error raised by minidao."""

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class MappingError(MiniDaoError):
    """Entity or criteria cannot be turned into a valid statement."""
    pass


class NotFoundError(MiniDaoError):
    """A named statement identifier is not registered."""
    pass


class ExecutionError(MiniDaoError):
    """Raised by the execution layer when the database rejects a statement."""

    def __init__(self, message, sql=None, params=None):
        super().__init__(message, {"sql": sql, "params": params})
        self.sql = sql
        self.params = params
