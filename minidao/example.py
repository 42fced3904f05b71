from dataclasses import dataclass, field
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from minidao.orm_types import Blob, Column, Number, Text


# dataclass entity, pk found by the "id" convention
@dataclass
class User:
    id: Optional[int] = None
    userName: Optional[str] = None
    age: Optional[int] = None


# declared columns, explicit pk and column override
class Product:
    class Meta:
        table_name = "products"

    productId = Number(pk=True)
    name = Text()
    unitPrice = Number(name="price_cents")
    image = Blob()


# plain annotated class, pk chosen through Meta
class AuditEntry:
    class Meta:
        pk = "entryKey"

    entryKey: str
    actorName: str
    action: str
    kind: ClassVar[str] = "audit"


# pydantic model
class Account(BaseModel):
    id: Optional[int] = None
    ownerName: Optional[str] = None
    balance: Optional[int] = None


@dataclass
class OrderItem:
    orderId: Optional[int] = field(default=None, metadata={"pk": True})
    sku: Optional[str] = None
    quantity: Optional[int] = None
    note: Optional[str] = field(default=None, metadata={"transient": True})


# no field qualifies as primary key
@dataclass
class LogLine:
    message: Optional[str] = None
    level: Optional[str] = None


SCHEMA = [
    "CREATE TABLE user (id INTEGER PRIMARY KEY AUTOINCREMENT, user_name TEXT, age INTEGER)",
    "CREATE TABLE products (product_id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT, "
    "price_cents INTEGER, image BLOB)",
    "CREATE TABLE audit_entry (entry_key TEXT PRIMARY KEY, actor_name TEXT, action TEXT)",
    "CREATE TABLE account (id INTEGER PRIMARY KEY AUTOINCREMENT, owner_name TEXT, balance INTEGER)",
]


def create_schema(engine):
    for ddl in SCHEMA:
        engine.execute(ddl)
