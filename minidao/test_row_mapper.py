from minidao.example import Account, AuditEntry, Product, User
from minidao.row_mapper import DictRowMapper, EntityRowMapper, RowMapper


def test_maps_columns_to_fields(resolver):
    mapper = EntityRowMapper(User, resolver)
    user = mapper.map_row({"id": 1, "user_name": "alice", "age": 30})

    assert user == User(id=1, userName="alice", age=30)


def test_unmapped_columns_ignored_and_fields_left_none(resolver):
    mapper = EntityRowMapper(User, resolver)
    user = mapper({"user_name": "bob", "last_login": "2024-01-01"})

    assert user == User(id=None, userName="bob", age=None)


def test_column_override_and_declared_defaults(resolver):
    product = EntityRowMapper(Product, resolver).map_row({"product_id": 3, "price_cents": 250})

    assert isinstance(product, Product)
    assert product.productId == 3
    assert product.unitPrice == 250
    assert product.name is None


def test_annotated_class(resolver):
    entry = EntityRowMapper(AuditEntry, resolver).map_row({"entry_key": "k", "action": "x"})

    assert entry.entryKey == "k"
    assert entry.action == "x"
    assert entry.actorName is None


def test_pydantic_model(resolver):
    account = EntityRowMapper(Account, resolver).map_row({"id": 2, "owner_name": "eve"})

    assert account == Account(id=2, ownerName="eve", balance=None)


def test_custom_policy():
    class UpperNames(RowMapper):
        def map_row(self, row):
            return row["user_name"].upper()

    assert UpperNames()({"user_name": "alice"}) == "ALICE"
    assert DictRowMapper().map_row({"a": 1}) == {"a": 1}
