# minidao - SQL statement building and row mapping for plain Python entities
from minidao.builder import StatementBuilder
from minidao.config import Settings
from minidao.criteria import Criteria
from minidao.database import DatabaseEngine
from minidao.exceptions import ExecutionError, MappingError, MiniDaoError, NotFoundError
from minidao.filters import and_, col, or_
from minidao.naming import CamelCaseNaming, IdentityNaming, NamingStrategy
from minidao.registry import NamedStatementRegistry
from minidao.resolver import NameResolver
from minidao.row_mapper import DictRowMapper, EntityRowMapper, RowMapper
from minidao.session import Session
from minidao.statement import BoundStatement

__version__ = "0.1.0"
__all__ = [
    "StatementBuilder", "Settings", "Criteria", "DatabaseEngine",
    "MiniDaoError", "MappingError", "NotFoundError", "ExecutionError",
    "col", "and_", "or_",
    "NamingStrategy", "CamelCaseNaming", "IdentityNaming",
    "NamedStatementRegistry", "NameResolver",
    "RowMapper", "EntityRowMapper", "DictRowMapper",
    "Session", "BoundStatement",
]
