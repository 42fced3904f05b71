from dataclasses import dataclass
from typing import Optional

import pytest
from pydantic import BaseModel, ConfigDict

from minidao.criteria import Criteria
from minidao.database import DatabaseEngine
from minidao.example import Account, AuditEntry, Product, User, create_schema
from minidao.exceptions import ExecutionError, MappingError, NotFoundError
from minidao.filters import col
from minidao.registry import NamedStatementRegistry
from minidao.row_mapper import RowMapper
from minidao.session import Session


class RecordingEngine:
    """Stands in for the database; records what it is asked to run."""

    def __init__(self):
        self.calls = []

    def execute(self, sql):
        self.calls.append(("execute", sql))

    def update(self, sql, params):
        self.calls.append(("update", sql, params))
        return 1

    def update_returning_key(self, sql, params, pk_column):
        self.calls.append(("update_returning_key", sql, params, pk_column))
        return 101

    def query(self, sql, params, mapper):
        self.calls.append(("query", sql, params))
        return []

    def query_scalar(self, sql, params):
        self.calls.append(("query_scalar", sql, params))
        return 0


@dataclass(frozen=True)
class FrozenUser:
    class Meta:
        table_name = "user"

    id: Optional[int] = None
    userName: Optional[str] = None
    age: Optional[int] = None


class FrozenAccount(BaseModel):
    model_config = ConfigDict(frozen=True)

    class Meta:
        table_name = "account"

    id: Optional[int] = None
    ownerName: Optional[str] = None
    balance: Optional[int] = None


def _seed(session):
    for name, age in [("alice", 30), ("bob", 25), ("carol", 35), ("dave", 25)]:
        session.insert(User(userName=name, age=age))


def test_insert_then_get_round_trip(session):
    user = User(userName="alice", age=30)
    key = session.insert(user)

    assert key == 1
    assert user.id == 1
    assert session.get(User, key) == User(id=1, userName="alice", age=30)


def test_get_missing_row_is_none(session):
    assert session.get(User, 404) is None


def test_insert_from_criteria(session):
    key = session.insert(Criteria(User).param("userName", "zed").param("age", 50))

    assert session.get(User, key).userName == "zed"


def test_insert_pydantic_round_trip(session):
    account = Account(ownerName="eve", balance=10)
    key = session.insert(account)

    assert account.id == key
    assert session.get(Account, key) == Account(id=key, ownerName="eve", balance=10)


def test_insert_immutable_entity_still_returns_key(session):
    user = FrozenUser(userName="alice", age=30)

    key = session.insert(user)

    assert key == 1
    assert user.id is None
    assert session.query_count(User) == 1
    assert session.get(FrozenUser, key) == FrozenUser(id=1, userName="alice", age=30)


def test_insert_frozen_pydantic_entity(session):
    account = FrozenAccount(ownerName="eve", balance=10)

    key = session.insert(account)

    assert key == 1
    assert account.id is None
    assert session.get(Account, key).ownerName == "eve"


def test_client_generated_key():
    engine = RecordingEngine()
    session = Session(engine, dialect="oracle")
    user = User(userName="alice")

    key = session.insert(user)

    kind, sql, params = engine.calls[0]
    assert kind == "update"
    assert sql == "INSERT INTO user (id, user_name) VALUES (?, ?)"
    assert params[0] == key
    assert user.id == key


def test_database_key_requested_with_pk_column():
    engine = RecordingEngine()
    key = Session(engine).insert(User(userName="alice", age=30))

    assert key == 101
    assert engine.calls == [
        ("update_returning_key", "INSERT INTO user (user_name, age) VALUES (?, ?)",
         ("alice", 30), "id"),
    ]


def test_save_returns_row_count(session):
    assert session.save(User(userName="x")) == 1
    assert session.query_count(User) == 1


def test_update(session):
    _seed(session)
    assert session.update(User(id=2, age=26)) == 1

    assert session.get(User, 2) == User(id=2, userName="bob", age=26)


def test_update_with_criteria(session):
    _seed(session)
    criteria = Criteria(User).param("userName", "robert").set_primary_key_override("id", 2)
    session.update(criteria)

    assert session.get(User, 2).userName == "robert"


def test_delete_variants(session):
    _seed(session)

    assert session.delete(User(id=1)) == 1
    assert session.delete_by_id(User, 2) == 1
    assert session.delete(Criteria(User).set_primary_key_override("id", 3)) == 1
    assert [u.userName for u in session.query_list(User)] == ["dave"]


def test_delete_all(session):
    _seed(session)
    session.delete_all(User)

    assert session.query_count(User) == 0


def test_query_list_and_count(session):
    _seed(session)

    assert len(session.query_list(User)) == 4
    assert session.query_count(User) == 4
    assert session.query_count(User(age=25)) == 2

    criteria = Criteria(User).where(col("age") >= 30).desc("age")
    assert [u.userName for u in session.query_list(criteria)] == ["carol", "alice"]

    page = Criteria(User).asc("id").page(1, 2)
    assert [u.id for u in session.query_list(User, page)] == [2, 3]


def test_query_entity_with_criteria(session):
    _seed(session)
    criteria = Criteria(User).predicate("userName", "LIKE", "%a%")

    found = session.query_list(User(age=25), criteria)

    assert [u.userName for u in found] == ["dave"]


def test_query_single_result(session):
    _seed(session)

    assert session.query_single_result(User(userName="carol")).age == 35
    assert session.query_single_result(User(userName="nobody")) is None


def test_get_with_criteria(session):
    _seed(session)

    assert session.get(Criteria(User).param("age", 25), 2).userName == "bob"
    assert session.get(Criteria(User).param("age", 99), 2) is None


def test_column_value(session):
    product = Product()
    product.name = "lamp"
    product.image = b"\x00\x01"
    key = session.insert(product)

    assert session.get_column_value(Product, "image", key) == b"\x00\x01"
    assert session.get_column_value(Product, "image", 999) is None


def test_string_primary_key(session):
    session.insert(Criteria(AuditEntry).set_primary_key_override("entryKey", "e-1")
                   .param("actorName", "root").param("action", "login"))

    entry = session.get(AuditEntry, "e-1")
    assert entry.actorName == "root"


def test_named_statements(engine):
    registry = NamedStatementRegistry({
        "user.adults": "SELECT user_name FROM user WHERE age >= :age ORDER BY user_name",
        "user.birthday": "UPDATE user SET age = age + 1 WHERE user_name IN (:names)",
    })
    session = Session(engine, dialect="sqlite", registry=registry)
    _seed(session)

    assert session.update_for_sql("user.birthday", {"names": ["bob", "dave"]}) == 2
    rows = session.query_for_sql("user.adults", {"age": 26})
    assert rows == [
        {"user_name": "alice"}, {"user_name": "bob"},
        {"user_name": "carol"}, {"user_name": "dave"},
    ]

    with pytest.raises(NotFoundError):
        session.query_for_sql("user.unknown")
    with pytest.raises(MappingError):
        session.query_for_sql("user.adults", {})


def test_custom_row_mapper(engine):
    class NameOnly(RowMapper):
        def __init__(self, cls, resolver):
            self.cls = cls

        def map_row(self, row):
            return row["user_name"]

    session = Session(engine, dialect="sqlite", row_mapper_factory=NameOnly)
    _seed(session)

    assert session.query_list(Criteria(User).asc("userName").limit(2)) == ["alice", "bob"]


def test_mapping_errors_never_reach_the_engine():
    engine = RecordingEngine()
    session = Session(engine)

    with pytest.raises(MappingError):
        session.update(User(userName="no id"))
    with pytest.raises(MappingError):
        session.delete(Criteria(User))
    with pytest.raises(MappingError):
        session.insert(User())
    with pytest.raises(MappingError):
        session.query_list(User, Criteria(Account))

    assert engine.calls == []


def test_execution_errors_pass_through(session):
    with pytest.raises(ExecutionError) as exc:
        session.insert(User(id=1, userName="a"))
        session.insert(User(id=1, userName="b"))

    assert "UNIQUE" in str(exc.value)
    assert exc.value.sql.startswith("INSERT INTO user")


def test_from_settings():
    from minidao.config import Settings

    settings = Settings(dialect="SQLite", naming="camel", log_sql=False)
    engine = DatabaseEngine.from_settings(settings)
    create_schema(engine)
    session = Session.from_settings(engine, settings)

    assert session.builder.dialect == "sqlite"
    session.insert(User(userName="alice"))
    session.delete_all(User)
    assert session.query_count(User) == 0
