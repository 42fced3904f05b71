import re
import threading
from dataclasses import dataclass, field

import pytest

from minidao.example import Account, AuditEntry, LogLine, OrderItem, Product, User
from minidao.exceptions import MappingError
from minidao.naming import CamelCaseNaming, IdentityNaming, camel_to_snake, snake_to_camel
from minidao.resolver import NameResolver


@pytest.mark.parametrize("name, expected", [
    ("User", "user"),
    ("userName", "user_name"),
    ("OrderItem", "order_item"),
    ("HTTPServer", "http_server"),
    ("age", "age"),
])
def test_camel_to_snake(name, expected):
    assert camel_to_snake(name) == expected


def test_snake_to_camel():
    assert snake_to_camel("user_name") == "userName"
    assert snake_to_camel("id") == "id"


def test_table_names(resolver):
    assert resolver.table_name(User) == "user"
    assert resolver.table_name(OrderItem) == "order_item"
    assert resolver.table_name(Product) == "products"
    assert resolver.table_name(User, "app_users") == "app_users"


def test_column_names(resolver):
    assert resolver.column_name("userName") == "user_name"
    assert resolver.column_name("userName", User) == "user_name"
    assert resolver.column_name("unitPrice", Product) == "price_cents"
    with pytest.raises(MappingError):
        resolver.column_name("nope", User)


def test_field_name_inverse_lookup(resolver):
    assert resolver.field_name("price_cents", Product) == "unitPrice"
    assert resolver.field_name("user_name", User) == "userName"
    assert resolver.field_name("created_at") == "createdAt"


def test_primary_key_discovery(resolver):
    assert resolver.primary_key_name(User) == "id"
    assert resolver.primary_key_name(Product) == "product_id"
    assert resolver.primary_key_name(OrderItem) == "order_id"
    assert resolver.primary_key_name(AuditEntry) == "entry_key"
    assert resolver.primary_key_name(Account) == "id"


def test_missing_primary_key(resolver):
    assert resolver.primary_key_name(LogLine, required=False) is None
    with pytest.raises(MappingError):
        resolver.primary_key_name(LogLine)


def test_two_marked_primary_keys(resolver):
    @dataclass
    class Twice:
        a: int = field(default=0, metadata={"pk": True})
        b: int = field(default=0, metadata={"pk": True})

    with pytest.raises(MappingError):
        resolver.describe(Twice)


def test_class_without_fields(resolver):
    class Empty:
        pass

    with pytest.raises(MappingError):
        resolver.describe(Empty)
    with pytest.raises(MappingError):
        resolver.describe(User(userName="x"))


def test_annotated_class_fields(resolver):
    mapper = resolver.describe(AuditEntry)

    assert mapper.fields == ["entryKey", "actorName", "action"]
    assert "kind" not in mapper.columns


def test_descriptor_is_cached(resolver):
    assert resolver.describe(User) is resolver.describe(User)


def test_concurrent_describe_yields_one_descriptor(resolver):
    results = []

    def worker():
        results.append(resolver.describe(Product))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert all(r is resolver.describe(Product) for r in results)


def test_primary_key_value_native_dialects(resolver):
    for dialect in ("mysql", "sqlite", "postgresql", None, "something-else"):
        assert resolver.primary_key_value(User, dialect) == ""


def test_primary_key_value_client_dialect(resolver):
    first = resolver.primary_key_value(User, "oracle")
    second = resolver.primary_key_value(User, "ORACLE")

    assert re.fullmatch(r"[0-9a-f]{32}", first)
    assert first != second


def test_custom_key_generator(resolver):
    resolver.register_key_generator("firebird", lambda: 42)

    assert resolver.primary_key_value(User, "firebird") == "42"


def test_identity_naming():
    resolver = NameResolver(IdentityNaming())

    assert resolver.table_name(User) == "User"
    assert resolver.column_name("userName", User) == "userName"
    assert isinstance(NameResolver().naming, CamelCaseNaming)
